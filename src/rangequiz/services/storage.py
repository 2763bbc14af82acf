"""Key-value storage for the persisted progress blob."""
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rangequiz.models.base import SessionLocal
from rangequiz.models.models import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """Synchronous string storage addressed by key."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get the value stored under key, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""


class InMemoryKeyValueStorage(KeyValueStorage):
    """Storage kept in a dict; lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class SqlKeyValueStorage(KeyValueStorage):
    """Storage backed by the kv_store table."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        """Initialize the storage with a session factory."""
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        db = self.session_factory()
        try:
            entry = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            return entry.value if entry else None
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        db = self.session_factory()
        try:
            entry = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            if entry:
                entry.value = value
            else:
                db.add(KeyValueEntry(key=key, value=value))
            db.commit()
            logger.debug(f"Stored {len(value)} characters under {key}")
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()
