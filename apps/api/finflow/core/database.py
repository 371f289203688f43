from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from finflow.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class Database:
    """Owned connection handle: the engine is created on first use and reused until ``close``."""

    def __init__(self, url: str | None, *, echo: bool = False) -> None:
        self.url = url
        self.echo = echo
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def connected(self) -> bool:
        return self._engine is not None

    def connect(self) -> Engine:
        if self._engine is not None:
            return self._engine
        if not self.url:
            raise ConfigurationError("DATABASE_URL must be set")

        engine = create_engine(self.url, echo=self.echo, pool_pre_ping=True)
        self._session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
        self._engine = engine
        logger.info("Connected to database %s", engine.url.render_as_string(hide_password=True))
        return engine

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.connect())

    @contextmanager
    def session(self) -> Iterator[Session]:
        self.connect()
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
