"""Configuration settings for the practice engine."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(BASE_DIR / env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))

# Practice settings
# Minutes until a word in each bucket is eligible again; the last bucket means mastered.
BUCKET_DELAYS_MINUTES = [
    0,  # immediate
    1,
    5,
    30,
    4 * 60,
    24 * 60,
    3 * 24 * 60,
    7 * 24 * 60,
    30 * 24 * 60,
]
MISSING_RANK_SENTINEL = 999999  # frequency rank used for words without one


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'hanzidrill.db'}")
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
class PracticeSettings:
    """Spaced repetition and session settings."""
    bucket_delays_minutes: list[int] = field(default_factory=lambda: list(BUCKET_DELAYS_MINUTES))
    jitter_min: float = float(os.getenv("JITTER_MIN", "0.75"))
    jitter_max: float = float(os.getenv("JITTER_MAX", "1.25"))
    default_session_size: int = int(os.getenv("DEFAULT_SESSION_SIZE", "10"))
    missing_rank_sentinel: int = int(os.getenv("MISSING_RANK_SENTINEL", str(MISSING_RANK_SENTINEL)))

    @property
    def max_bucket(self) -> int:
        """Index of the mastered bucket."""
        return len(self.bucket_delays_minutes) - 1


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_practice_settings() -> PracticeSettings:
    """Get practice settings."""
    return PracticeSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    practice: PracticeSettings = field(default_factory=get_practice_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        delays = self.practice.bucket_delays_minutes
        if not delays:
            raise ValueError("Bucket delay table must not be empty")

        if any(later < earlier for earlier, later in zip(delays, delays[1:])):
            raise ValueError("Bucket delays must be non-decreasing")

        if self.practice.jitter_min <= 0 or self.practice.jitter_min > self.practice.jitter_max:
            raise ValueError("JITTER_MIN must be positive and not greater than JITTER_MAX")

        if self.practice.default_session_size < 1:
            raise ValueError("DEFAULT_SESSION_SIZE must be positive")


# Create global settings instance
settings = Settings()
settings.validate()
