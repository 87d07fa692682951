"""ORM models for devices, login events and account flags."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

from sharewatch.common.clock import utcnow

Base = declarative_base()


class AuthorizedDevice(Base):
    """A device counted against a user's device cap while is_active."""
    __tablename__ = "authorized_devices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    fingerprint = Column(String(128), nullable=False)
    device_name = Column(Text)
    device_type = Column(String(16))
    browser = Column(String(64))
    os = Column(String(64))
    ip_address = Column(String(64))
    city = Column(Text)
    country = Column(Text)
    login_count = Column(Integer, default=1, nullable=False)
    first_seen = Column(DateTime, default=utcnow, nullable=False)
    last_seen = Column(DateTime, default=utcnow, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "fingerprint", name="uq_user_device_fingerprint"),
        Index("idx_user_devices_active", "user_id", "is_active"),
    )

    def __repr__(self):
        return f"<AuthorizedDevice(user_id={self.user_id}, name={self.device_name}, active={self.is_active})>"


class LoginEventRow(Base):
    """Append-only login attempt. id doubles as the ordering tie-breaker."""
    __tablename__ = "login_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    device_fingerprint = Column(String(128))
    ip_address = Column(String(64))
    city = Column(Text)
    country = Column(Text)
    latitude = Column(Numeric(10, 7, asdecimal=False))
    longitude = Column(Numeric(10, 7, asdecimal=False))
    login_time = Column(DateTime, default=utcnow, nullable=False)
    success = Column(Boolean, default=True, nullable=False)
    failure_reason = Column(Text)

    __table_args__ = (
        Index("idx_login_events_user", "user_id", "login_time"),
    )

    def __repr__(self):
        return f"<LoginEventRow(user_id={self.user_id}, success={self.success}, at={self.login_time})>"


class FlaggedAccount(Base):
    """Review-queue entry. Review columns belong to the review workflow."""
    __tablename__ = "flagged_accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False)
    reason = Column(String(64), nullable=False)
    data = Column(Text)  # JSON evidence
    flagged_at = Column(DateTime, default=utcnow, nullable=False)
    reviewed_by = Column(Text)
    reviewed_at = Column(DateTime)
    status = Column(String(16), default="pending", nullable=False)
    notes = Column(Text)

    __table_args__ = (
        Index("idx_flagged_accounts_pending", "status"),
        Index("idx_flagged_accounts_user", "user_id", "reason", "status"),
    )

    def __repr__(self):
        return f"<FlaggedAccount(user_id={self.user_id}, reason={self.reason}, status={self.status})>"
