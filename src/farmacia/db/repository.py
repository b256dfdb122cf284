"""Database engine and session management."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from farmacia.db.models import Base

logger = logging.getLogger(__name__)


class Database:
    """Lazily created SQLite engine plus a session factory for one file."""

    def __init__(self, database_path: Path) -> None:
        self.database_path = Path(database_path)
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is not None:
            return self._engine

        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            f"sqlite:///{self.database_path}",
            future=True,
            echo=False,
        )
        try:
            Base.metadata.create_all(engine)
        except OperationalError as exc:
            if "already exists" in str(exc).lower():
                logger.debug("Database schema already initialized: %s", exc)
            else:
                engine.dispose()
                raise
        except Exception:
            engine.dispose()
            raise
        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, autocommit=False, future=True
        )
        return engine

    def session(self) -> Session:
        if self._session_factory is None:
            self.engine
        assert self._session_factory is not None  # for mypy
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Context manager yielding a session with automatic commit/rollback."""
        session = self.session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Release pooled connections; the engine is rebuilt on next use."""

        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None


__all__ = ["Database"]
