"""Configuration module - environment settings and fraud rules."""

from sharewatch.common.config.settings import (
    Config,
    Environment,
    LogLevel,
    get_config,
    reset_config,
)
from sharewatch.common.config.rules import FraudRules, PatternWeights, load_rules

__all__ = [
    "Config",
    "Environment",
    "LogLevel",
    "get_config",
    "reset_config",
    "FraudRules",
    "PatternWeights",
    "load_rules",
]
