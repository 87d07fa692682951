"""Device Registry - per-user device cap enforcement and device activity.

The cap only gates *new* devices: a fingerprint already active for the
user is always re-admitted. Check and activation for a new device run
inside one transaction while holding a per-user lock (in-process, plus a
transaction-scoped advisory lock on PostgreSQL), so concurrent logins from
two new devices cannot both slip under the cap.
"""

import hashlib
import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from sharewatch.common.clock import Clock, utcnow
from sharewatch.common.config.rules import FraudRules
from sharewatch.common.exceptions import DeviceLimitExceededError
from sharewatch.data.schemas.device import Device, DeviceAdmission, DeviceInfo
from sharewatch.data.schemas.request import GeoLocation
from sharewatch.storage.database import Database
from sharewatch.storage.models import AuthorizedDevice

logger = logging.getLogger(__name__)


class UserLockRegistry:
    """One re-entrant lock per user id, created on first use.

    Locks are held weakly: an entry lives only while some caller holds or
    waits on it, so the registry stays bounded by concurrent users.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[str, threading.RLock]" = (
            weakref.WeakValueDictionary()
        )

    def __len__(self) -> int:
        return len(self._locks)

    def lock_for(self, user_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[user_id] = lock
            return lock

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        lock = self.lock_for(user_id)
        with lock:
            yield


def advisory_lock_key(user_id: str) -> int:
    """Signed 64-bit key for pg_advisory_xact_lock derived from the user id."""
    digest = hashlib.sha256(user_id.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big", signed=True)


def denial_message(max_devices: int) -> str:
    return (
        f"Device limit reached ({max_devices} max). "
        f"Remove a device in settings to continue."
    )


class DeviceRegistry:
    """Tracks each user's authorized devices and enforces the device cap.

    Store errors propagate as StoreError: admission must never silently
    allow or deny.
    """

    def __init__(
        self,
        database: Database,
        rules: Optional[FraudRules] = None,
        clock: Clock = utcnow,
        locks: Optional[UserLockRegistry] = None,
    ):
        """Initialize the registry.

        Args:
            database: Store holding authorized_devices
            rules: Fraud rules (max_devices_per_user)
            clock: Naive-UTC time source
            locks: Shared per-user lock registry
        """
        self.database = database
        self.rules = rules or FraudRules()
        self.clock = clock
        self.locks = locks or UserLockRegistry()

    @property
    def max_devices(self) -> int:
        return self.rules.max_devices_per_user

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    def check_device_limit(self, user_id: str, fingerprint: str) -> DeviceAdmission:
        """Decide whether a fingerprint may log in for this user.

        Read-only. Use admit_device when the decision must be acted on
        atomically.
        """
        with self.database.session_scope("check_device_limit") as session:
            active = self._active_devices(session, user_id)
            return self._evaluate(active, fingerprint)

    def admit_device(
        self,
        user_id: str,
        fingerprint: str,
        device_info: DeviceInfo,
        ip_address: str,
        geo: Optional[GeoLocation] = None,
    ) -> DeviceAdmission:
        """Check the cap and, if allowed, register the device in one transaction.

        Returns:
            The admission decision; the device is recorded only when allowed
        """
        with self.locks.hold(user_id):
            with self.database.session_scope("admit_device") as session:
                self._acquire_advisory_lock(session, user_id)
                active = self._active_devices(session, user_id)
                admission = self._evaluate(active, fingerprint)
                if admission.allowed:
                    self._upsert(session, user_id, fingerprint, device_info, ip_address, geo)
                else:
                    logger.warning(
                        f"[DEVICE] Denied new device for user {user_id}: "
                        f"{admission.active_device_count} active"
                    )
                return admission

    def register_device(
        self,
        user_id: str,
        fingerprint: str,
        device_info: DeviceInfo,
        ip_address: str,
        geo: Optional[GeoLocation] = None,
    ) -> Device:
        """Record a successful login from a device, creating it if unseen.

        Existing devices get last_seen, login_count, IP and (non-null) geo
        refreshed and are forced active.

        Raises:
            DeviceLimitExceededError: If activating the device would exceed the cap
            StoreError: If the store fails
        """
        with self.locks.hold(user_id):
            with self.database.session_scope("register_device") as session:
                self._acquire_advisory_lock(session, user_id)
                row = self._upsert(session, user_id, fingerprint, device_info, ip_address, geo)
                return Device.model_validate(row)

    # ------------------------------------------------------------------
    # Device management (used by the settings collaborator)
    # ------------------------------------------------------------------

    def list_devices(self, user_id: str, active_only: bool = False) -> List[Device]:
        """Return a user's devices, most recently seen first."""
        with self.database.session_scope("list_devices") as session:
            query = session.query(AuthorizedDevice).filter(AuthorizedDevice.user_id == user_id)
            if active_only:
                query = query.filter(AuthorizedDevice.is_active.is_(True))
            rows = query.order_by(AuthorizedDevice.last_seen.desc(), AuthorizedDevice.id.desc()).all()
            return [Device.model_validate(row) for row in rows]

    def deactivate_device(self, user_id: str, fingerprint: str) -> bool:
        """Stop counting a device against the cap. Rows are never deleted.

        Returns:
            True if an active device was deactivated
        """
        with self.locks.hold(user_id):
            with self.database.session_scope("deactivate_device") as session:
                self._acquire_advisory_lock(session, user_id)
                row = (
                    session.query(AuthorizedDevice)
                    .filter(
                        AuthorizedDevice.user_id == user_id,
                        AuthorizedDevice.fingerprint == fingerprint,
                        AuthorizedDevice.is_active.is_(True),
                    )
                    .one_or_none()
                )
                if row is None:
                    return False
                row.is_active = False
                logger.info(f"[DEVICE] Deactivated device for user {user_id}: {row.device_name}")
                return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _acquire_advisory_lock(self, session: Session, user_id: str) -> None:
        if self.database.dialect_name == "postgresql":
            session.execute(
                text("SELECT pg_advisory_xact_lock(:key)"),
                {"key": advisory_lock_key(user_id)},
            )

    def _active_devices(self, session: Session, user_id: str) -> List[AuthorizedDevice]:
        return (
            session.query(AuthorizedDevice)
            .filter(
                AuthorizedDevice.user_id == user_id,
                AuthorizedDevice.is_active.is_(True),
            )
            .all()
        )

    def _evaluate(self, active: List[AuthorizedDevice], fingerprint: str) -> DeviceAdmission:
        count = len(active)

        # Known device - always allow
        if any(device.fingerprint == fingerprint for device in active):
            return DeviceAdmission(allowed=True, active_device_count=count, is_new_device=False)

        if count >= self.max_devices:
            return DeviceAdmission(
                allowed=False,
                active_device_count=count,
                is_new_device=True,
                message=denial_message(self.max_devices),
            )

        return DeviceAdmission(allowed=True, active_device_count=count, is_new_device=True)

    def _upsert(
        self,
        session: Session,
        user_id: str,
        fingerprint: str,
        device_info: DeviceInfo,
        ip_address: str,
        geo: Optional[GeoLocation],
    ) -> AuthorizedDevice:
        now = self.clock()
        city = geo.city if geo else None
        country = geo.country if geo else None

        existing = (
            session.query(AuthorizedDevice)
            .filter(
                AuthorizedDevice.user_id == user_id,
                AuthorizedDevice.fingerprint == fingerprint,
            )
            .one_or_none()
        )

        if existing is None or not existing.is_active:
            # Re-check immediately before activation
            active_count = len(self._active_devices(session, user_id))
            if active_count >= self.max_devices:
                raise DeviceLimitExceededError(
                    denial_message(self.max_devices),
                    user_id=user_id,
                    active_device_count=active_count,
                )

        if existing is not None:
            existing.last_seen = now
            existing.login_count = (existing.login_count or 0) + 1
            existing.ip_address = ip_address
            existing.city = city or existing.city
            existing.country = country or existing.country
            existing.is_active = True
            session.flush()
            return existing

        device = AuthorizedDevice(
            user_id=user_id,
            fingerprint=fingerprint,
            device_name=device_info.device_name,
            device_type=device_info.device_type,
            browser=device_info.browser,
            os=device_info.os,
            ip_address=ip_address,
            city=city or None,
            country=country or None,
            login_count=1,
            first_seen=now,
            last_seen=now,
            is_active=True,
            created_at=now,
        )
        session.add(device)
        session.flush()
        logger.info(f"[DEVICE] New device registered for user {user_id}: {device_info.device_name}")
        return device
