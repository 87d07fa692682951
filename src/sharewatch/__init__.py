"""ShareWatch - device fingerprinting and account-sharing fraud detection."""

__version__ = "0.1.0"
__author__ = "ShareWatch Team"

# Core exports
from sharewatch.orchestration.login_guard import LoginGuard, LoginOutcome
from sharewatch.data.schemas import FingerprintRequest, GeoLocation, FlagReason

__all__ = [
    "LoginGuard",
    "LoginOutcome",
    "FingerprintRequest",
    "GeoLocation",
    "FlagReason",
]
