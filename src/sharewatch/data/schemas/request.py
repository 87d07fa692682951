"""Login request context - attributes supplied by the HTTP and geo collaborators."""

from typing import Optional
from pydantic import BaseModel, Field


class FingerprintRequest(BaseModel):
    """Observable client attributes for one login request.

    Any attribute may be empty. Only user_agent, accept_language,
    ip_address, platform and screen_resolution feed the fingerprint.
    """
    user_agent: str = Field(default="", description="User-Agent header")
    accept_language: str = Field(default="", description="Accept-Language header")
    accept_encoding: str = Field(default="", description="Accept-Encoding header")
    ip_address: str = Field(default="", description="Client IP address")
    timezone: Optional[str] = Field(default=None, description="Client-reported timezone")
    screen_resolution: str = Field(default="", description="Client-reported screen size")
    platform: str = Field(default="", description="Client-reported platform")

    model_config = {
        "json_schema_extra": {
            "example": {
                "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0",
                "accept_language": "en-US,en;q=0.9",
                "accept_encoding": "gzip, deflate, br",
                "ip_address": "203.0.113.7",
                "timezone": "America/New_York",
                "screen_resolution": "1920x1080",
                "platform": "Win32",
            }
        }
    }


class GeoLocation(BaseModel):
    """Resolved geographic location for a request IP.

    Supplied by the geolocation collaborator; every field is optional.
    """
    city: Optional[str] = Field(default=None, description="City name")
    country: Optional[str] = Field(default=None, description="Country name or code")
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None
