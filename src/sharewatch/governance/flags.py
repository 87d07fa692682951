"""Flagging Service - deduplicated review-queue entries for detector findings.

At most one pending flag exists per (user, reason). A repeat finding while
a flag is still pending is suppressed. Concurrent first findings may race
and produce one extra pending row; that is tolerated.

This service only creates and reads flags. Status transitions belong to
the review workflow.
"""

import logging
from typing import List, Optional, Union

from sharewatch.common.clock import Clock, utcnow
from sharewatch.common.constants import DataConstants
from sharewatch.common.exceptions import ValidationError
from sharewatch.data.schemas.account_flag import (
    AccountFlag,
    FlagEvidence,
    FlagReason,
    FlagStatus,
    evidence_adapter,
)
from sharewatch.storage.database import Database
from sharewatch.storage.models import FlaggedAccount

logger = logging.getLogger(__name__)


def _coerce_reason(reason: Union[FlagReason, str]) -> FlagReason:
    try:
        return FlagReason(reason)
    except ValueError as e:
        raise ValidationError(
            f"Unknown flag reason: {reason}",
            details={"allowed": [r.value for r in FlagReason]},
        ) from e


def _to_schema(row: FlaggedAccount) -> AccountFlag:
    return AccountFlag(
        flag_id=row.id,
        user_id=row.user_id,
        reason=FlagReason(row.reason),
        data=evidence_adapter.validate_json(row.data) if row.data else None,
        status=FlagStatus(row.status),
        flagged_at=row.flagged_at,
        reviewed_by=row.reviewed_by,
        reviewed_at=row.reviewed_at,
        notes=row.notes,
    )


class FlaggingService:
    """Persists detector findings as pending account flags."""

    def __init__(self, database: Database, clock: Clock = utcnow):
        self.database = database
        self.clock = clock

    def flag_if_suspicious(
        self,
        user_id: str,
        reason: Union[FlagReason, str],
        data: Optional[FlagEvidence] = None,
    ) -> Optional[AccountFlag]:
        """Create a pending flag unless one is already pending for this reason.

        Args:
            user_id: Flagged account
            reason: Finding category
            data: Evidence; its reason tag must match ``reason``

        Returns:
            The new flag, or None if an equivalent flag was already pending

        Raises:
            ValidationError: On an unknown reason or mismatched evidence
            StoreError: If the store fails
        """
        reason = _coerce_reason(reason)
        if data is not None and data.reason != reason.value:
            raise ValidationError(
                "Evidence does not match flag reason",
                details={"reason": reason.value, "evidence_reason": data.reason},
            )

        with self.database.session_scope("flag_account") as session:
            existing = (
                session.query(FlaggedAccount)
                .filter(
                    FlaggedAccount.user_id == user_id,
                    FlaggedAccount.reason == reason.value,
                    FlaggedAccount.status == FlagStatus.PENDING.value,
                )
                .first()
            )
            if existing is not None:
                logger.info(f"[FRAUD] User {user_id} already flagged for: {reason.value}")
                return None

            row = FlaggedAccount(
                user_id=user_id,
                reason=reason.value,
                data=data.model_dump_json() if data is not None else None,
                status=FlagStatus.PENDING.value,
                flagged_at=self.clock(),
            )
            session.add(row)
            session.flush()
            logger.warning(f"[FRAUD] User {user_id} flagged for review: {reason.value}")
            return _to_schema(row)

    def pending_flags(self, limit: int = DataConstants.PENDING_FLAGS_LIMIT) -> List[AccountFlag]:
        """Oldest pending flags first, for the review queue."""
        with self.database.session_scope("pending_flags") as session:
            rows = (
                session.query(FlaggedAccount)
                .filter(FlaggedAccount.status == FlagStatus.PENDING.value)
                .order_by(FlaggedAccount.flagged_at.asc(), FlaggedAccount.id.asc())
                .limit(limit)
                .all()
            )
            return [_to_schema(row) for row in rows]

    def flags_for_user(self, user_id: str) -> List[AccountFlag]:
        """All flags for a user in any status, newest first."""
        with self.database.session_scope("flags_for_user") as session:
            rows = (
                session.query(FlaggedAccount)
                .filter(FlaggedAccount.user_id == user_id)
                .order_by(FlaggedAccount.flagged_at.desc(), FlaggedAccount.id.desc())
                .all()
            )
            return [_to_schema(row) for row in rows]
