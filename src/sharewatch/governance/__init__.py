"""Governance - account flags for human review."""

from sharewatch.governance.flags import FlaggingService

__all__ = ["FlaggingService"]
