"""Login Event Recorder - append-only audit of every login attempt.

Recording is best-effort: a store failure is logged and swallowed so that
a missed audit row never blocks a legitimate login.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sharewatch.common.clock import Clock, utcnow
from sharewatch.common.exceptions import StoreError
from sharewatch.data.schemas.login_event import LoginEvent
from sharewatch.data.schemas.request import GeoLocation
from sharewatch.storage.database import Database
from sharewatch.storage.models import LoginEventRow

logger = logging.getLogger(__name__)


class LoginEventRecorder:
    """Writes login events and reads them back newest first."""

    def __init__(self, database: Database, clock: Clock = utcnow):
        self.database = database
        self.clock = clock

    def record(
        self,
        user_id: str,
        fingerprint: Optional[str],
        ip_address: str,
        success: bool,
        failure_reason: Optional[str] = None,
        geo: Optional[GeoLocation] = None,
    ) -> Optional[LoginEvent]:
        """Append one login event.

        Args:
            user_id: Account the attempt was made against
            fingerprint: Device fingerprint, if one could be derived
            ip_address: Client IP
            success: Authentication outcome
            failure_reason: Why the attempt failed (e.g. "device_limit")
            geo: Resolved location, if available

        Returns:
            The stored event, or None if the store rejected the write
        """
        geo = geo or GeoLocation()
        row = LoginEventRow(
            user_id=user_id,
            device_fingerprint=fingerprint or None,
            ip_address=ip_address,
            city=geo.city or None,
            country=geo.country or None,
            latitude=geo.latitude,
            longitude=geo.longitude,
            success=success,
            failure_reason=failure_reason or None,
            login_time=self.clock(),
        )
        try:
            with self.database.session_scope("record_login_event") as session:
                session.add(row)
                session.flush()
                return LoginEvent.model_validate(_as_event_dict(row))
        except StoreError as e:
            logger.error(f"[LOGIN] Failed to record login event for user {user_id}: {e.message}")
            return None

    def recent_events(
        self,
        user_id: str,
        since: datetime,
        success_only: bool = False,
        limit: Optional[int] = None,
        exclude_event_id: Optional[int] = None,
    ) -> List[LoginEvent]:
        """Events for a user at or after ``since``, newest first.

        Ties on login_time are broken by the event sequence.

        Raises:
            StoreError: If the store fails
        """
        with self.database.session_scope("recent_login_events") as session:
            query = session.query(LoginEventRow).filter(
                LoginEventRow.user_id == user_id,
                LoginEventRow.login_time >= since,
            )
            if success_only:
                query = query.filter(LoginEventRow.success.is_(True))
            if exclude_event_id is not None:
                query = query.filter(LoginEventRow.id != exclude_event_id)
            query = query.order_by(LoginEventRow.login_time.desc(), LoginEventRow.id.desc())
            if limit is not None:
                query = query.limit(limit)
            return [LoginEvent.model_validate(_as_event_dict(row)) for row in query.all()]


def _as_event_dict(row: LoginEventRow) -> dict:
    return {
        "event_id": row.id,
        "user_id": row.user_id,
        "device_fingerprint": row.device_fingerprint,
        "ip_address": row.ip_address,
        "city": row.city,
        "country": row.country,
        "latitude": row.latitude,
        "longitude": row.longitude,
        "success": row.success,
        "failure_reason": row.failure_reason,
        "login_time": row.login_time,
    }
