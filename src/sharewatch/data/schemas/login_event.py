"""LoginEvent schema - immutable record of one authentication attempt."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class LoginEvent(BaseModel):
    """Login event entity schema.

    Append-only. event_id is a monotonic sequence used to break
    login_time ties.
    """
    event_id: int = Field(..., description="Monotonic event sequence")
    user_id: str = Field(..., description="Target user account")
    device_fingerprint: Optional[str] = Field(default=None, description="Client fingerprint")
    ip_address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    success: bool = Field(..., description="Whether login succeeded")
    failure_reason: Optional[str] = None
    login_time: datetime = Field(..., description="Attempt timestamp (UTC)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "event_id": 1042,
                "user_id": "user_abc123",
                "device_fingerprint": "9f2c...e1",
                "ip_address": "203.0.113.7",
                "city": "New York",
                "country": "US",
                "latitude": 40.7128,
                "longitude": -74.0060,
                "success": True,
                "failure_reason": None,
                "login_time": "2026-01-25T14:30:05",
            }
        },
    }

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None
