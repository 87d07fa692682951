"""Unit tests for the Device Registry."""

import gc
import threading
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from sharewatch.common.config.rules import FraudRules
from sharewatch.common.exceptions import DeviceLimitExceededError, StoreError
from sharewatch.data.schemas.device import DeviceAdmission, DeviceInfo
from sharewatch.data.schemas.request import GeoLocation
from sharewatch.devices.registry import DeviceRegistry, UserLockRegistry, advisory_lock_key
from sharewatch.storage.models import AuthorizedDevice

USER = "user_abc123"
INFO = DeviceInfo(browser="Chrome", os="Windows", device_type="desktop", device_name="Windows - Chrome")


@pytest.fixture
def registry(database, clock):
    return DeviceRegistry(database, FraudRules(), clock=clock)


def _register(registry, *fingerprints, user_id=USER, geo=None):
    for fingerprint in fingerprints:
        registry.register_device(user_id, fingerprint, INFO, "203.0.113.7", geo)


class TestCheckDeviceLimit:

    def test_first_device_is_new_and_allowed(self, registry):
        result = registry.check_device_limit(USER, "fp-1")
        assert result == DeviceAdmission(allowed=True, active_device_count=0, is_new_device=True)

    def test_known_device_is_not_new(self, registry):
        _register(registry, "fp-1")
        result = registry.check_device_limit(USER, "fp-1")
        assert result.allowed is True
        assert result.is_new_device is False
        assert result.active_device_count == 1

    def test_new_device_under_cap_is_allowed(self, registry):
        _register(registry, "fp-1", "fp-2")
        result = registry.check_device_limit(USER, "fp-3")
        assert result.allowed is True
        assert result.is_new_device is True
        assert result.active_device_count == 2

    def test_new_device_at_cap_is_denied(self, registry):
        _register(registry, "fp-1", "fp-2", "fp-3")
        result = registry.check_device_limit(USER, "fp-4")
        assert result.allowed is False
        assert result.is_new_device is True
        assert result.active_device_count == 3
        assert "Device limit reached (3 max)" in result.message
        assert "Remove a device in settings" in result.message

    def test_known_device_readmitted_when_over_cap(self, registry, database, clock):
        """Historical state above the cap never locks out a known device."""
        with database.session_scope() as session:
            for i in range(5):
                session.add(AuthorizedDevice(
                    user_id=USER, fingerprint=f"legacy-{i}", login_count=1,
                    first_seen=clock(), last_seen=clock(), is_active=True,
                ))
        result = registry.check_device_limit(USER, "legacy-2")
        assert result.allowed is True
        assert result.is_new_device is False
        assert result.active_device_count == 5

    def test_inactive_device_counts_as_new(self, registry):
        _register(registry, "fp-1", "fp-2", "fp-3")
        registry.deactivate_device(USER, "fp-1")
        result = registry.check_device_limit(USER, "fp-1")
        assert result.is_new_device is True
        assert result.allowed is True

    def test_devices_are_scoped_per_user(self, registry):
        _register(registry, "fp-1", "fp-2", "fp-3", user_id="other_user")
        assert registry.check_device_limit(USER, "fp-4").allowed is True

    def test_cap_follows_rules(self, database, clock):
        registry = DeviceRegistry(database, FraudRules(max_devices_per_user=1), clock=clock)
        _register(registry, "fp-1")
        assert registry.check_device_limit(USER, "fp-2").allowed is False

    def test_store_error_propagates(self, registry):
        failure = OperationalError("SELECT", {}, Exception("connection lost"))
        with patch.object(registry, "_active_devices", side_effect=failure):
            with pytest.raises(StoreError) as exc_info:
                registry.check_device_limit(USER, "fp-1")
        assert exc_info.value.details["operation"] == "check_device_limit"


class TestRegisterDevice:

    def test_new_device_is_created(self, registry, clock, new_york):
        device = registry.register_device(USER, "fp-1", INFO, "203.0.113.7", new_york)
        assert device.login_count == 1
        assert device.first_seen == clock()
        assert device.last_seen == clock()
        assert device.is_active is True
        assert device.city == "New York"
        assert device.device_name == "Windows - Chrome"

    def test_existing_device_is_updated(self, registry, clock, new_york, london):
        registry.register_device(USER, "fp-1", INFO, "203.0.113.7", new_york)
        first_seen = clock()
        clock.advance(hours=2)

        device = registry.register_device(USER, "fp-1", INFO, "198.51.100.4", london)

        assert device.login_count == 2
        assert device.first_seen == first_seen
        assert device.last_seen == clock()
        assert device.ip_address == "198.51.100.4"
        assert device.city == "London"
        assert device.country == "GB"

    def test_missing_geo_keeps_last_location(self, registry, new_york):
        registry.register_device(USER, "fp-1", INFO, "203.0.113.7", new_york)
        device = registry.register_device(USER, "fp-1", INFO, "203.0.113.8", GeoLocation())
        assert device.city == "New York"
        assert device.country == "US"

    def test_reactivates_inactive_device(self, registry):
        _register(registry, "fp-1")
        registry.deactivate_device(USER, "fp-1")
        device = registry.register_device(USER, "fp-1", INFO, "203.0.113.7")
        assert device.is_active is True
        assert device.login_count == 2

    def test_new_device_over_cap_raises(self, registry):
        _register(registry, "fp-1", "fp-2", "fp-3")
        with pytest.raises(DeviceLimitExceededError) as exc_info:
            registry.register_device(USER, "fp-4", INFO, "203.0.113.7")
        assert exc_info.value.active_device_count == 3
        assert exc_info.value.code == "DEVICE_LIMIT"
        assert len(registry.list_devices(USER)) == 3

    def test_reactivation_over_cap_raises(self, registry):
        _register(registry, "fp-1", "fp-2", "fp-3")
        registry.deactivate_device(USER, "fp-1")
        _register(registry, "fp-4")
        with pytest.raises(DeviceLimitExceededError):
            registry.register_device(USER, "fp-1", INFO, "203.0.113.7")


class TestAdmitDevice:

    def test_allowed_device_is_registered(self, registry):
        admission = registry.admit_device(USER, "fp-1", INFO, "203.0.113.7")
        assert admission.allowed is True
        assert admission.is_new_device is True
        assert [d.fingerprint for d in registry.list_devices(USER)] == ["fp-1"]

    def test_denied_device_is_not_registered(self, registry):
        _register(registry, "fp-1", "fp-2", "fp-3")
        admission = registry.admit_device(USER, "fp-4", INFO, "203.0.113.7")
        assert admission.allowed is False
        assert len(registry.list_devices(USER)) == 3

    def test_concurrent_new_devices_never_exceed_cap(self, registry):
        """Ten new devices racing for three slots: exactly three win."""
        results = []
        errors = []
        barrier = threading.Barrier(10)

        def attempt(i):
            try:
                barrier.wait()
                results.append(registry.admit_device(USER, f"fp-{i}", INFO, "203.0.113.7"))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=attempt, args=(i,)) for i in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert sum(1 for r in results if r.allowed) == 3
        assert len(registry.list_devices(USER, active_only=True)) == 3


class TestDeviceManagement:

    def test_list_devices_newest_first(self, registry, clock):
        _register(registry, "fp-1")
        clock.advance(minutes=5)
        _register(registry, "fp-2")
        assert [d.fingerprint for d in registry.list_devices(USER)] == ["fp-2", "fp-1"]

    def test_list_active_only(self, registry):
        _register(registry, "fp-1", "fp-2")
        registry.deactivate_device(USER, "fp-1")
        assert [d.fingerprint for d in registry.list_devices(USER, active_only=True)] == ["fp-2"]
        assert len(registry.list_devices(USER)) == 2

    def test_deactivate_unknown_device(self, registry):
        assert registry.deactivate_device(USER, "missing") is False

    def test_deactivate_frees_a_slot(self, registry):
        _register(registry, "fp-1", "fp-2", "fp-3")
        assert registry.deactivate_device(USER, "fp-2") is True
        assert registry.admit_device(USER, "fp-4", INFO, "203.0.113.7").allowed is True


class TestLocks:

    def test_same_user_shares_lock(self):
        locks = UserLockRegistry()
        assert locks.lock_for("a") is locks.lock_for("a")
        assert locks.lock_for("a") is not locks.lock_for("b")

    def test_lock_shared_while_held(self):
        locks = UserLockRegistry()
        with locks.hold("a"):
            assert len(locks) == 1
            held = locks.lock_for("a")
            assert locks.lock_for("a") is held

    def test_released_locks_are_dropped(self):
        locks = UserLockRegistry()
        for n in range(100):
            with locks.hold(f"user_{n}"):
                pass
        gc.collect()
        assert len(locks) == 0

    def test_advisory_key_is_stable_signed_64bit(self):
        key = advisory_lock_key(USER)
        assert key == advisory_lock_key(USER)
        assert -(2 ** 63) <= key < 2 ** 63
        assert key != advisory_lock_key("someone_else")
