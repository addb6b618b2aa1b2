"""Thin SQLAlchemy adapter owning the engine and session lifecycle."""

from collections.abc import Iterator
from contextlib import contextmanager
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from core.infrastructure.sql.tables import Base
from core.utils.constants import ENV_IMAGE_DATABASE_ECHO, ENV_IMAGE_DATABASE_URL


class SQLAdapter:
    """Low-level database access (mechanical, no error handling).

    This adapter:
    - Builds one SQLAlchemy engine per process
    - Hands out short-lived sessions that commit on success
    - Does NOT translate errors (lets them bubble up)
    """

    def __init__(self, database_url: str | None = None) -> None:
        """Create the engine from an explicit URL or the environment."""
        url = database_url or os.getenv(ENV_IMAGE_DATABASE_URL)
        if not url:
            raise RuntimeError(f"{ENV_IMAGE_DATABASE_URL} environment variable is not set")

        echo = os.getenv(ENV_IMAGE_DATABASE_ECHO, "false").lower() == "true"

        self.engine: Engine = create_engine(url, echo=echo, pool_pre_ping=True)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session, committing on exit and rolling back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_tables(self) -> None:
        """Create the image tables if they do not exist (local development and tests)."""
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.engine.dispose()
