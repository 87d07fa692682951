"""Device registry - per-user device cap and device activity."""

from sharewatch.devices.registry import DeviceRegistry, UserLockRegistry, advisory_lock_key

__all__ = ["DeviceRegistry", "UserLockRegistry", "advisory_lock_key"]
