"""Login event tracking."""

from sharewatch.tracking.recorder import LoginEventRecorder

__all__ = ["LoginEventRecorder"]
