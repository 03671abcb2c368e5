# customerbook/db/session.py

from __future__ import annotations

import logging
from contextlib import contextmanager
from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from customerbook.config import Settings, get_settings
from customerbook.db.base import Base

logger = logging.getLogger(__name__)


def _unicode_lower(value):
    if value is None:
        return None
    return str(value).lower()


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class Database:
    """
    Process-scoped storage handle: owns the engine and the session factory.

    Create one per process, call `open()` on startup and `close()` on shutdown,
    and hand it to whatever needs sessions (the customer store).
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.echo = echo
        self._engine: Engine | None = None
        self._sessionmaker: sessionmaker[Session] | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "Database":
        settings = settings or get_settings()
        return cls(settings.database_url, echo=settings.database_echo)

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not open; call open() first.")
        return self._engine

    def open(self) -> "Database":
        if self._engine is not None:
            return self

        is_sqlite = self.url.startswith("sqlite")
        is_postgres = self.url.startswith("postgres")
        engine_kwargs: dict[str, object] = {
            "future": True,
            "pool_pre_ping": True,
            "echo": self.echo,
        }
        if is_postgres:
            engine_kwargs.update(
                {
                    "pool_recycle": 1800,
                    "pool_size": 5,
                    "max_overflow": 10,
                    "pool_timeout": 30,
                }
            )
        if is_sqlite and _is_memory_sqlite(self.url):
            # one shared connection, otherwise every checkout sees an empty database
            engine_kwargs.update(
                {
                    "connect_args": {"check_same_thread": False},
                    "poolclass": StaticPool,
                }
            )

        engine = create_engine(self.url, **engine_kwargs)

        if is_sqlite:
            @event.listens_for(engine, "connect")
            def _register_sqlite_functions(dbapi_connection, connection_record):  # type: ignore[no-redef]
                # SQLite's built-in lower() only folds ASCII
                dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

        self._engine = engine
        self._sessionmaker = sessionmaker(
            bind=engine,
            class_=Session,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
            future=True,
        )
        logger.info("Database opened (dialect=%s)", engine.dialect.name)
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database closed")

    def create_all(self) -> None:
        """
        Create missing tables. Production schemas are managed by Alembic.
        """
        from customerbook.db import models  # noqa: F401  # populate Base.metadata

        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Yields a session inside one transaction: commits on success, rolls back on error.
        """
        if self._sessionmaker is None:
            raise RuntimeError("Database is not open; call open() first.")
        s: Session = self._sessionmaker()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()
