"""Fingerprint generation and user-agent parsing."""

from sharewatch.fingerprint.generator import (
    FINGERPRINT_FIELDS,
    fingerprint_components,
    generate_fingerprint,
    is_degenerate,
)
from sharewatch.fingerprint.user_agent import parse_user_agent

__all__ = [
    "FINGERPRINT_FIELDS",
    "fingerprint_components",
    "generate_fingerprint",
    "is_degenerate",
    "parse_user_agent",
]
