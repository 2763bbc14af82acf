"""Configuration settings for the quiz bot."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))

# Quiz defaults
DEFAULT_REFERENCE_FILE = "hand_range.csv"
DEFAULT_STORAGE_KEY = "preflop-range-progress"
DEFAULT_ANSWER_OPTIONS = "0,1,2,3,5,7,8,9,10"


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///rangequiz.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class BotSettings:
    """Bot configuration settings."""
    token: str = os.getenv("TELEGRAM_BOT_TOKEN", "")


def get_answer_options() -> list[int]:
    """Get the answer options from environment variable."""
    raw = os.getenv("QUIZ_ANSWER_OPTIONS", DEFAULT_ANSWER_OPTIONS)
    return [int(value) for value in raw.split(",") if value.strip()]


@dataclass
class QuizSettings:
    """Quiz settings."""
    base_path: str = os.getenv("QUIZ_BASE_PATH", str(DATA_DIR))
    reference_file: str = os.getenv("QUIZ_REFERENCE_FILE", DEFAULT_REFERENCE_FILE)
    storage_key: str = os.getenv("QUIZ_STORAGE_KEY", DEFAULT_STORAGE_KEY)
    answer_options: list[int] = field(default_factory=get_answer_options)


@dataclass
class MonitoringSettings:
    """Prometheus metrics settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_bot_settings() -> BotSettings:
    """Get bot settings."""
    return BotSettings()


def get_quiz_settings() -> QuizSettings:
    """Get quiz settings."""
    return QuizSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    bot: BotSettings = field(default_factory=get_bot_settings)
    quiz: QuizSettings = field(default_factory=get_quiz_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.bot.token:
            raise ValueError("TELEGRAM_BOT_TOKEN is required")

        if not self.quiz.answer_options:
            raise ValueError("QUIZ_ANSWER_OPTIONS must contain at least one value")

        if len(set(self.quiz.answer_options)) != len(self.quiz.answer_options):
            raise ValueError("QUIZ_ANSWER_OPTIONS must not contain duplicates")

        if not self.quiz.storage_key:
            raise ValueError("QUIZ_STORAGE_KEY cannot be empty")


# Create global settings instance
settings = Settings()
