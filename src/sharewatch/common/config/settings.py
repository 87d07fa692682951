"""Configuration management - Centralized configuration for ShareWatch.

Provides environment-aware configuration with sensible defaults.
All configuration is loaded from environment variables with fallbacks.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# Shipped as package data so wheel installs find it too
DEFAULT_RULES_FILE = Path(__file__).resolve().with_name("fraud_rules.yaml")


@dataclass
class Config:
    """Central configuration object for ShareWatch.

    All settings can be overridden via environment variables prefixed with SHAREWATCH_.

    Example:
        SHAREWATCH_ENVIRONMENT=production
        SHAREWATCH_DATABASE_URL=postgresql+psycopg2://app@db/sharewatch
        SHAREWATCH_RULES_FILE=/etc/sharewatch/fraud_rules.yaml
    """

    # Core settings
    environment: Environment = field(
        default_factory=lambda: Environment(
            os.getenv("SHAREWATCH_ENVIRONMENT", "development")
        )
    )
    debug: bool = field(
        default_factory=lambda: os.getenv("SHAREWATCH_DEBUG", "false").lower() == "true"
    )
    log_level: LogLevel = field(
        default_factory=lambda: LogLevel(os.getenv("SHAREWATCH_LOG_LEVEL", "INFO"))
    )

    # Store settings
    database_url: str = field(
        default_factory=lambda: os.getenv(
            "SHAREWATCH_DATABASE_URL", "sqlite:///./sharewatch.db"
        )
    )
    database_echo: bool = field(
        default_factory=lambda: os.getenv("SHAREWATCH_DATABASE_ECHO", "false").lower() == "true"
    )

    # Fraud rules
    rules_file: Optional[Path] = field(
        default_factory=lambda: (
            Path(os.environ["SHAREWATCH_RULES_FILE"])
            if os.getenv("SHAREWATCH_RULES_FILE")
            else None
        )
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.database_url:
            raise ValueError("SHAREWATCH_DATABASE_URL must not be empty")

        # Warn about debug in production
        if self.environment == Environment.PRODUCTION and self.debug:
            import warnings
            warnings.warn(
                "Debug mode is enabled in production environment",
                RuntimeWarning,
                stacklevel=2
            )

    @property
    def resolved_rules_file(self) -> Path:
        """Rules file from the environment, else the packaged defaults."""
        return self.rules_file or DEFAULT_RULES_FILE

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION


# Singleton instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config: The global configuration singleton.
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
