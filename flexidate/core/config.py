"""
Library configuration module.
Loads environment variables and provides library-wide date settings.
"""
from pathlib import Path

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

# Get project root (two levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """
    Library settings loaded from environment variables or .env file.
    (Note: Environment variables take precedence over .env file)

    Every field is read from the environment with the ``FLEXIDATE_`` prefix,
    e.g. ``FLEXIDATE_DEFAULT_TIMEZONE=Europe/Rome``.
    """
    # Timezone used when neither the caller nor the input supplies one ("" = host TZ, then UTC)
    DEFAULT_TIMEZONE: str = ""

    # Pattern used to re-render date objects and as the storage format
    DEFAULT_FORMAT: str = "Y-m-d H:i:s"

    # Accepted year range for structured parts
    YEAR_MIN: int = 1
    YEAR_MAX: int = 9999

    # Locale-aware formatting (both must be set to enable it)
    LOCALE: str = ""
    CALENDAR: str = ""

    # Language for month/day names in the fixed-pattern formatter
    LANGCODE: str = "en"

    # Calendar weeks
    FIRST_DAY: int = 0  # 0 = Sunday ... 6 = Saturday
    ISO8601_WEEKS: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_prefix="FLEXIDATE_",
        case_sensitive=True,
        env_file_encoding='utf-8',
        extra='ignore'
        )


def get_settings() -> Settings:
    """
    Get settings instance.

    A fresh instance is built on every call so that environment changes
    (e.g. in tests) are picked up.

    Returns:
        Settings: Library settings
    """
    return Settings()
