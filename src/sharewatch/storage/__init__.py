"""Persistence - SQLAlchemy models and session management."""

from sharewatch.storage.database import Database
from sharewatch.storage.models import AuthorizedDevice, Base, FlaggedAccount, LoginEventRow

__all__ = ["Database", "Base", "AuthorizedDevice", "LoginEventRow", "FlaggedAccount"]
