"""Configuration settings for the bot."""
import os
import re
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)

SUPPORTED_LANGUAGES = ("uk", "en")
TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///vocabot.db")
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
    webhook_url: Optional[str] = os.getenv("TELEGRAM_WEBHOOK_URL")
    webhook_listen: str = os.getenv("TELEGRAM_WEBHOOK_LISTEN", "0.0.0.0")
    webhook_port: int = int(os.getenv("TELEGRAM_WEBHOOK_PORT", "8443"))


@dataclass
class LearningSettings:
    """Learning process settings."""
    new_words_count: int = int(os.getenv("NEW_WORDS_COUNT", "3"))
    repetition_words_count: int = int(os.getenv("REPETITION_WORDS_COUNT", "10"))
    answer_delay_seconds: float = float(os.getenv("ANSWER_DELAY_SECONDS", "30"))
    default_new_words_time: str = os.getenv("DEFAULT_NEW_WORDS_TIME", "20:00")
    default_repetition_time: str = os.getenv("DEFAULT_REPETITION_TIME", "09:00")


@dataclass
class LanguageSettings:
    """Language pair settings, used only for message texts."""
    source_language_code: str = os.getenv("SOURCE_LANGUAGE_CODE", "uk").lower()
    source_language: str = os.getenv("SOURCE_LANGUAGE", "Ukrainian")
    target_language: str = os.getenv("TARGET_LANGUAGE", "English")


@dataclass
class ImportSettings:
    """Vocabulary import settings."""
    csv_path: Optional[str] = os.getenv("WORDS_CSV_PATH")


@dataclass
class MonitoringSettings:
    """Prometheus exporter settings."""
    metrics_port: int = int(os.getenv("METRICS_PORT", "0"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_bot_settings() -> BotSettings:
    """Get bot settings."""
    return BotSettings()


def get_learning_settings() -> LearningSettings:
    """Get learning settings."""
    return LearningSettings()


def get_language_settings() -> LanguageSettings:
    """Get language settings."""
    return LanguageSettings()


def get_import_settings() -> ImportSettings:
    """Get import settings."""
    return ImportSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    bot: BotSettings = field(default_factory=get_bot_settings)
    learning: LearningSettings = field(default_factory=get_learning_settings)
    language: LanguageSettings = field(default_factory=get_language_settings)
    importer: ImportSettings = field(default_factory=get_import_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.bot.token:
            raise ValueError("TELEGRAM_BOT_TOKEN is required")

        if self.learning.new_words_count < 1:
            raise ValueError("NEW_WORDS_COUNT must be positive")

        if self.learning.repetition_words_count < 1:
            raise ValueError("REPETITION_WORDS_COUNT must be positive")

        if self.learning.answer_delay_seconds < 0:
            raise ValueError("ANSWER_DELAY_SECONDS cannot be negative")

        if not TIME_PATTERN.match(self.learning.default_new_words_time):
            raise ValueError("DEFAULT_NEW_WORDS_TIME must be in HH:MM format")

        if not TIME_PATTERN.match(self.learning.default_repetition_time):
            raise ValueError("DEFAULT_REPETITION_TIME must be in HH:MM format")

        if self.language.source_language_code not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"SOURCE_LANGUAGE_CODE must be one of {', '.join(SUPPORTED_LANGUAGES)}"
            )


# Create global settings instance
settings = Settings()
settings.validate()
