"""Data schemas - canonical Pydantic definitions."""

from sharewatch.data.schemas.request import FingerprintRequest, GeoLocation
from sharewatch.data.schemas.device import Device, DeviceAdmission, DeviceInfo
from sharewatch.data.schemas.login_event import LoginEvent
from sharewatch.data.schemas.account_flag import (
    AccountFlag,
    FlagEvidence,
    FlagReason,
    FlagStatus,
    ImpossibleTravelEvidence,
    PatternEvidence,
    evidence_adapter,
)

__all__ = [
    "FingerprintRequest",
    "GeoLocation",
    "Device",
    "DeviceAdmission",
    "DeviceInfo",
    "LoginEvent",
    "AccountFlag",
    "FlagEvidence",
    "FlagReason",
    "FlagStatus",
    "ImpossibleTravelEvidence",
    "PatternEvidence",
    "evidence_adapter",
]
