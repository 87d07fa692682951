"""Fraud rules - thresholds and weights for admission and detection.

Rules are loaded from YAML and validated into a Pydantic model. A missing
file yields the built-in defaults; a malformed file is a configuration error.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from sharewatch.common.constants import (
    DeviceConstants,
    GeoConstants,
    PatternConstants,
)
from sharewatch.common.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class PatternWeights(BaseModel):
    """Risk points added per triggered pattern signal."""
    location: int = Field(default=PatternConstants.LOCATION_WEIGHT, ge=0)
    devices: int = Field(default=PatternConstants.DEVICE_WEIGHT, ge=0)
    simultaneous: int = Field(default=PatternConstants.SIMULTANEOUS_WEIGHT, ge=0)


class FraudRules(BaseModel):
    """Runtime thresholds for the device cap and both detectors."""

    version: str = Field(default="1.0.0", description="Rules version")

    # Device admission
    max_devices_per_user: int = Field(
        default=DeviceConstants.MAX_DEVICES_PER_USER,
        ge=1,
        description="Maximum simultaneously active devices per user"
    )

    # Impossible travel
    impossible_travel_kmh: float = Field(
        default=GeoConstants.IMPOSSIBLE_TRAVEL_KMH,
        gt=0,
        description="Implied speed above which travel is impossible"
    )
    travel_lookback_hours: int = Field(default=GeoConstants.TRAVEL_LOOKBACK_HOURS, ge=1)
    travel_history_limit: int = Field(default=GeoConstants.TRAVEL_HISTORY_LIMIT, ge=1)

    # Login patterns
    pattern_window_days: int = Field(default=PatternConstants.WINDOW_DAYS, ge=1)
    pattern_min_events: int = Field(default=PatternConstants.MIN_EVENTS, ge=1)
    location_diversity_threshold: int = Field(
        default=PatternConstants.LOCATION_DIVERSITY_THRESHOLD, ge=1
    )
    simultaneous_window_minutes: float = Field(
        default=PatternConstants.SIMULTANEOUS_WINDOW_MINUTES, gt=0
    )
    suspicious_threshold: int = Field(default=PatternConstants.SUSPICIOUS_THRESHOLD, ge=0)
    weights: PatternWeights = Field(default_factory=PatternWeights)

    model_config = {
        "json_schema_extra": {
            "example": {
                "version": "1.0.0",
                "max_devices_per_user": 3,
                "impossible_travel_kmh": 800,
                "pattern_window_days": 7,
                "suspicious_threshold": 50,
                "weights": {"location": 20, "devices": 30, "simultaneous": 40},
            }
        }
    }


def load_rules(rules_file: Optional[Union[str, Path]] = None) -> FraudRules:
    """Load fraud rules from a YAML file.

    Args:
        rules_file: Path to the rules YAML. ``None`` or a missing file
            returns the defaults.

    Returns:
        Validated FraudRules

    Raises:
        ConfigurationError: If the file cannot be parsed or fails validation
    """
    if rules_file is None:
        return FraudRules()

    path = Path(rules_file)
    if not path.exists():
        logger.warning(f"[RULES] Rules file not found, using defaults: {path}")
        return FraudRules()

    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Fraud rules file is not valid YAML: {path}",
            details={"path": str(path), "error": str(e)},
        ) from e

    try:
        return FraudRules.model_validate(raw)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Fraud rules failed validation: {path}",
            details={"path": str(path), "errors": e.errors()},
        ) from e
