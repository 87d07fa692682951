"""Database connection and session management."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from sharewatch.common.config.settings import get_config
from sharewatch.common.exceptions import StoreError
from sharewatch.storage.models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine and hands out transactional sessions.

    Every ``session_scope`` is one transaction: committed when the block
    exits cleanly, rolled back otherwise. Driver errors surface as
    StoreError.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        echo: bool = False,
        engine: Optional[Engine] = None,
    ):
        """Initialize the database.

        Args:
            url: SQLAlchemy URL. Defaults to SHAREWATCH_DATABASE_URL.
            echo: Log emitted SQL.
            engine: Pre-built engine (overrides url).
        """
        if engine is None:
            url = url or get_config().database_url
            kwargs = {"echo": echo, "pool_pre_ping": True}
            if url.startswith("sqlite"):
                kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
            engine = create_engine(url, **kwargs)

        self.engine = engine
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def create_all(self) -> None:
        """Create tables if they don't exist. Production uses migrations."""
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        """Close pooled connections."""
        self.engine.dispose()

    @contextmanager
    def session_scope(self, operation: str = "store") -> Iterator[Session]:
        """Provide a transactional scope around a series of operations.

        Args:
            operation: Name used in StoreError details and logs

        Raises:
            StoreError: If the store fails for any reason
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Store failure during {operation}: {e}")
            raise StoreError(
                f"Store failure during {operation}",
                operation=operation,
                details={"error": str(e)},
            ) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
