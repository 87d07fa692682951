"""Device fingerprint generation.

The fingerprint is a SHA-256 hex digest over a fixed, ordered tuple of
request attributes joined with ``||``:

    user_agent || accept_language || ip_address || platform || screen_resolution

Changing the order or the separator changes every stored fingerprint and
makes all known devices look new.
"""

import hashlib

from sharewatch.common.constants import DeviceConstants
from sharewatch.data.schemas.request import FingerprintRequest

FINGERPRINT_FIELDS = (
    "user_agent",
    "accept_language",
    "ip_address",
    "platform",
    "screen_resolution",
)


def fingerprint_components(request: FingerprintRequest) -> str:
    """Canonical pre-image of a fingerprint."""
    return DeviceConstants.FINGERPRINT_SEPARATOR.join(
        getattr(request, name) or "" for name in FINGERPRINT_FIELDS
    )


def generate_fingerprint(request: FingerprintRequest) -> str:
    """Derive a stable device identifier from request attributes.

    Args:
        request: Client attributes; empty fields are allowed

    Returns:
        64-character lowercase hex digest
    """
    hasher = hashlib.new(DeviceConstants.FINGERPRINT_HASH_ALGORITHM)
    hasher.update(fingerprint_components(request).encode("utf-8"))
    return hasher.hexdigest()


def is_degenerate(request: FingerprintRequest) -> bool:
    """True when every fingerprint field is empty.

    Such fingerprints collide across clients and should be treated as
    low-trust by callers.
    """
    return not any(getattr(request, name) for name in FINGERPRINT_FIELDS)
