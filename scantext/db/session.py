"""Database handle: engine and session factory with explicit lifecycle.

The process entry point owns a ``Database``: it calls ``connect`` at
startup and ``dispose`` at shutdown, then hands the instance to the
record store. Nothing in the core creates one on its own.
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from scantext.utils.config import DatabaseConfig
from scantext.utils.logger import get_logger

from .base import Base

logger = get_logger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or url.startswith("sqlite:///:memory:?")


class Database:
    """Owns the SQLAlchemy engine for the record store.

    Args:
        config: Database URL and echo flag.
    """

    def __init__(self, config: DatabaseConfig | None = None) -> None:
        self.config = config or DatabaseConfig()
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._engine

    def connect(self) -> "Database":
        """Create the engine and make sure the tables exist."""
        if self._engine is not None:
            return self

        url = self.config.url
        if _is_memory_sqlite(url):
            # one shared connection, otherwise every session sees an empty database
            engine = create_engine(
                url,
                echo=self.config.echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        elif url.startswith("sqlite"):
            engine = create_engine(
                url,
                echo=self.config.echo,
                connect_args={"check_same_thread": False},
            )
        else:
            engine = create_engine(
                url,
                echo=self.config.echo,
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10,
            )

        Base.metadata.create_all(engine)
        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info("Connected to record database (dialect=%s)", engine.dialect.name)
        return self

    def dispose(self) -> None:
        """Release pooled connections; safe to call more than once."""
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Record database disposed")
        self._engine = None
        self._session_factory = None

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """One session per call: commit on success, rollback on error, always close."""
        if self._session_factory is None:
            raise RuntimeError("Database is not connected; call connect() first")
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
