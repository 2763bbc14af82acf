"""Test configuration."""
import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite://")

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from rangequiz.models.quiz_models import Item  # noqa: E402
from rangequiz.services.progress_service import ProgressService  # noqa: E402
from rangequiz.services.storage import InMemoryKeyValueStorage  # noqa: E402

STORAGE_KEY = "preflop-range-progress"


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    """Create an empty in-memory storage."""
    return InMemoryKeyValueStorage()


@pytest.fixture
def progress_service(storage: InMemoryKeyValueStorage) -> ProgressService:
    """Create a progress service over the in-memory storage."""
    return ProgressService(storage, STORAGE_KEY)


@pytest.fixture
def items() -> list[Item]:
    """A few hands with different weights."""
    return [
        Item(hand="AA", color="紺", players=10, misses=1),
        Item(hand="KQs", color="赤", players=9, misses=3),
        Item(hand="72o", color="グレー", players=0, misses=1),
    ]
