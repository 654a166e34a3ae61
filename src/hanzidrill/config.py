"""Configuration settings for the drill engine."""
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)

# Spaced repetition defaults
MIN_INTERVAL_SECONDS = 30
MAX_INTERVAL_SECONDS = 365 * 24 * 60 * 60
EARLY_REVIEW_MULTIPLIER = 1.05
GOOD_REVIEW_MULTIPLIER = 5
FIRST_TIME_SUCCESS_INTERVAL_SECONDS = 7 * 24 * 60 * 60

PROGRESS_STORAGE_KEY = "hanzidrill-progress"


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///hanzidrill.db")
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


@dataclass(frozen=True)
class SpacedRepetitionSettings:
    """Interval engine parameters.

    Intervals are in seconds. Early reviews (before the word is due) grow the
    interval by ``early_review_multiplier`` times the elapsed time, on-time
    reviews by ``good_review_multiplier`` times the elapsed time.
    """
    min_interval_seconds: int = int(os.getenv("SRS_MIN_INTERVAL_SECONDS", str(MIN_INTERVAL_SECONDS)))
    max_interval_seconds: int = int(os.getenv("SRS_MAX_INTERVAL_SECONDS", str(MAX_INTERVAL_SECONDS)))
    early_review_multiplier: float = float(os.getenv("SRS_EARLY_REVIEW_MULTIPLIER", str(EARLY_REVIEW_MULTIPLIER)))
    good_review_multiplier: float = float(os.getenv("SRS_GOOD_REVIEW_MULTIPLIER", str(GOOD_REVIEW_MULTIPLIER)))
    first_time_success_interval_seconds: int = int(
        os.getenv("SRS_FIRST_TIME_SUCCESS_INTERVAL_SECONDS", str(FIRST_TIME_SUCCESS_INTERVAL_SECONDS))
    )


@dataclass
class StorageSettings:
    """Progress snapshot storage settings."""
    key: str = os.getenv("PROGRESS_STORAGE_KEY", PROGRESS_STORAGE_KEY)


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_spaced_repetition_settings() -> SpacedRepetitionSettings:
    """Get spaced repetition settings."""
    return SpacedRepetitionSettings()


def get_storage_settings() -> StorageSettings:
    """Get storage settings."""
    return StorageSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    spaced_repetition: SpacedRepetitionSettings = field(default_factory=get_spaced_repetition_settings)
    storage: StorageSettings = field(default_factory=get_storage_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        srs = self.spaced_repetition
        if srs.min_interval_seconds <= 0:
            raise ValueError("SRS_MIN_INTERVAL_SECONDS must be positive")

        if srs.min_interval_seconds > srs.max_interval_seconds:
            raise ValueError("SRS_MIN_INTERVAL_SECONDS cannot be greater than SRS_MAX_INTERVAL_SECONDS")

        if srs.early_review_multiplier <= 0 or srs.good_review_multiplier <= 0:
            raise ValueError("Review multipliers must be positive")

        if srs.first_time_success_interval_seconds < srs.min_interval_seconds or \
           srs.first_time_success_interval_seconds > srs.max_interval_seconds:
            raise ValueError(
                "SRS_FIRST_TIME_SUCCESS_INTERVAL_SECONDS must be between "
                "SRS_MIN_INTERVAL_SECONDS and SRS_MAX_INTERVAL_SECONDS"
            )

        if not self.storage.key:
            raise ValueError("PROGRESS_STORAGE_KEY cannot be empty")


# Create global settings instance
settings = Settings()
settings.validate()
