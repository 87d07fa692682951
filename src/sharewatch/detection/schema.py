"""Detector output schemas.

Pure data validation; no store access.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from sharewatch.common.constants import PatternConstants


class TravelCheck(BaseModel):
    """Result of an impossible-travel check."""

    is_impossible: bool = Field(..., description="Implied speed exceeds the threshold")
    details: Optional[str] = Field(default=None, description="Human-readable finding")
    distance_km: Optional[float] = Field(default=None, ge=0)
    elapsed_hours: Optional[float] = None
    speed_kmh: Optional[float] = Field(
        default=None, description="None when elapsed time is zero or negative"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "is_impossible": True,
                "details": "Travel of 5570km in 0.5h (11140 km/h) exceeds 800 km/h threshold",
                "distance_km": 5570.2,
                "elapsed_hours": 0.5,
                "speed_kmh": 11140.4,
            }
        }
    }


class PatternAnalysis(BaseModel):
    """Result of login-pattern analysis.

    risk_score is the raw additive score and may exceed 100.
    """

    suspicious: bool = Field(..., description="risk_score reached the threshold")
    reasons: List[str] = Field(default_factory=list)
    risk_score: int = Field(default=0, ge=0)
    events_analyzed: int = Field(default=0, ge=0)

    model_config = {
        "json_schema_extra": {
            "example": {
                "suspicious": True,
                "reasons": [
                    "Multiple locations: 3 different cities in 7 days",
                    "Excessive devices: 4 different devices in 7 days",
                ],
                "risk_score": 50,
                "events_analyzed": 9,
            }
        }
    }

    @property
    def display_score(self) -> int:
        """Score clamped to 0-100 for display only."""
        return max(0, min(PatternConstants.DISPLAY_MAX, self.risk_score))
