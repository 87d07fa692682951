"""AccountFlag schemas - review-queue findings and their typed evidence."""

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter


class FlagReason(str, Enum):
    """Why an account was flagged."""
    IMPOSSIBLE_TRAVEL = "impossible_travel"
    SUSPICIOUS_LOGIN_PATTERN = "suspicious_login_pattern"


class FlagStatus(str, Enum):
    """Review lifecycle. Only PENDING is written by this engine."""
    PENDING = "pending"
    REVIEWED = "reviewed"
    DISMISSED = "dismissed"
    CONFIRMED = "confirmed"


class ImpossibleTravelEvidence(BaseModel):
    """Evidence for an impossible-travel finding."""
    reason: Literal["impossible_travel"] = "impossible_travel"
    details: str
    distance_km: float = Field(..., ge=0)
    elapsed_hours: float
    speed_kmh: Optional[float] = Field(
        default=None, description="None when elapsed time was zero or negative"
    )


class PatternEvidence(BaseModel):
    """Evidence for a suspicious login-pattern finding."""
    reason: Literal["suspicious_login_pattern"] = "suspicious_login_pattern"
    risk_score: int = Field(..., ge=0)
    reasons: List[str] = Field(default_factory=list)


FlagEvidence = Annotated[
    Union[ImpossibleTravelEvidence, PatternEvidence],
    Field(discriminator="reason"),
]

evidence_adapter: TypeAdapter = TypeAdapter(FlagEvidence)


class AccountFlag(BaseModel):
    """A persisted finding awaiting (or past) human review."""
    flag_id: int
    user_id: str
    reason: FlagReason
    data: Optional[FlagEvidence] = None
    status: FlagStatus = FlagStatus.PENDING
    flagged_at: datetime
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    notes: Optional[str] = None
