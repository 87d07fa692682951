"""Device schemas - parsed client metadata, stored devices, admission results."""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field


class DeviceInfo(BaseModel):
    """Best-effort metadata parsed from a user-agent string.

    Never used for admission decisions.
    """
    browser: str = Field(default="Unknown", description="Browser family")
    os: str = Field(default="Unknown", description="Operating system family")
    device_type: Literal["mobile", "tablet", "desktop"] = Field(
        default="desktop", description="Device category"
    )
    device_name: str = Field(default="Unknown - Unknown", description="Display name")


class Device(BaseModel):
    """An authorized client for one user.

    fingerprint is a hash, never the raw request attributes.
    """
    fingerprint: str = Field(..., description="Device fingerprint hash")
    user_id: str = Field(..., description="Owning user")
    device_name: Optional[str] = None
    device_type: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    ip_address: Optional[str] = Field(default=None, description="Last seen IP")
    city: Optional[str] = Field(default=None, description="Last seen city")
    country: Optional[str] = Field(default=None, description="Last seen country")
    login_count: int = Field(default=1, ge=0)
    first_seen: datetime
    last_seen: datetime
    is_active: bool = True

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "fingerprint": "9f2c...e1",
                "user_id": "user_abc123",
                "device_name": "Windows - Chrome",
                "device_type": "desktop",
                "browser": "Chrome",
                "os": "Windows",
                "ip_address": "203.0.113.7",
                "city": "New York",
                "country": "US",
                "login_count": 12,
                "first_seen": "2026-01-02T09:00:00",
                "last_seen": "2026-01-25T14:30:00",
                "is_active": True,
            }
        },
    }


class DeviceAdmission(BaseModel):
    """Outcome of a device-limit check."""
    allowed: bool = Field(..., description="Whether the device may log in")
    active_device_count: int = Field(..., ge=0, description="Active devices observed")
    is_new_device: bool = Field(..., description="Fingerprint not among active devices")
    message: Optional[str] = Field(default=None, description="User-facing denial message")
