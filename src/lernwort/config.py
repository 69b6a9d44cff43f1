"""Configuration settings for the application."""
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

# Speech settings
SPEECH_SAMPLE_RATE = 24000  # Hz, fixed by the speech endpoint
SPEECH_CHANNELS = 1
SPEECH_MAX_ATTEMPTS = 3  # 1 initial + 2 retries


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
    url: str = os.getenv("DATABASE_URL", "sqlite:///lernwort.db")
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
class SyncSettings:
    """Remote word store settings."""
    sheet_url: str = os.getenv("SHEET_URL", "")
    timeout: float = float(os.getenv("SYNC_TIMEOUT", "30"))
    auto_sync: bool = os.getenv("AUTO_SYNC", "true").lower() == "true"


@dataclass
class SpeechSettings:
    """Speech generation and playback settings."""
    api_key: str = os.getenv("GEMINI_API_KEY", "")
    model: str = os.getenv("SPEECH_MODEL", "gemini-2.5-flash-preview-tts")
    voice: str = os.getenv("SPEECH_VOICE", "Kore")
    sample_rate: int = SPEECH_SAMPLE_RATE
    channels: int = SPEECH_CHANNELS
    max_attempts: int = int(os.getenv("SPEECH_MAX_ATTEMPTS", str(SPEECH_MAX_ATTEMPTS)))
    retry_delay: float = float(os.getenv("SPEECH_RETRY_DELAY", "1.0"))
    cache_size: int = int(os.getenv("SPEECH_CACHE_SIZE", "0"))  # 0 means unbounded
    fallback_language: str = os.getenv("FALLBACK_LANGUAGE", "de")
    fallback_rate: int = int(os.getenv("FALLBACK_RATE", "150"))  # words per minute


@dataclass
class ContentSettings:
    """Word lookup settings."""
    source_language: str = os.getenv("SOURCE_LANGUAGE", "de")
    native_language: str = os.getenv("NATIVE_LANGUAGE", "en")


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


def get_sync_settings() -> SyncSettings:
    """Get sync settings."""
    return SyncSettings()


def get_speech_settings() -> SpeechSettings:
    """Get speech settings."""
    return SpeechSettings()


def get_content_settings() -> ContentSettings:
    """Get content settings."""
    return ContentSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    sync: SyncSettings = field(default_factory=get_sync_settings)
    speech: SpeechSettings = field(default_factory=get_speech_settings)
    content: ContentSettings = field(default_factory=get_content_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.speech.max_attempts < 1:
            raise ValueError("SPEECH_MAX_ATTEMPTS must be at least 1")

        if self.speech.retry_delay < 0:
            raise ValueError("SPEECH_RETRY_DELAY cannot be negative")

        if self.speech.cache_size < 0:
            raise ValueError("SPEECH_CACHE_SIZE cannot be negative")

        if self.speech.sample_rate <= 0 or self.speech.channels <= 0:
            raise ValueError("Speech sample rate and channel count must be positive")

        if self.sync.timeout <= 0:
            raise ValueError("SYNC_TIMEOUT must be positive")


# Create global settings instance
settings = Settings()
settings.validate()
