"""Database connection and session management"""
import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from listening_stats.db_config import DatabaseConfig
from listening_stats.models.db import Base

logger = logging.getLogger(__name__)

SQLITE_PRAGMAS = (
    "pragma journal_mode = wal",
    "pragma synchronous = normal",
    "pragma temp_store = memory",
)

class Database:
    """Connection and session manager for the local listening history database"""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._engine: Optional[Engine] = None
        self._SessionLocal = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._engine

    def init(self) -> None:
        """
        Initialize database connection and create tables.
        """
        try:
            self.config.ensure_parent_folder()
            connection_string = self.config.to_connection_string()
            if self.config.in_memory:
                # A single shared connection keeps the in-memory database alive between sessions
                self._engine = create_engine(
                    connection_string,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool
                )
            else:
                self._engine = create_engine(connection_string)
                event.listen(self._engine, "connect", _apply_pragmas)
            Base.metadata.create_all(self._engine)
            self._SessionLocal = sessionmaker(bind=self._engine)
            logger.info(f"Database initialized successfully ({self.config.path})")

        except SQLAlchemyError as e:
            logger.error(f"Database initialization failed: {e}")
            raise

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations"""
        if not self._SessionLocal:
            raise RuntimeError("Database not initialized. Call init() first.")

        session = self._SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_session(self) -> Session:
        """Get a new database session"""
        if not self._SessionLocal:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._SessionLocal()

    def dispose(self) -> None:
        """
        Clean up database connections.
        Should be called during application shutdown.
        """
        if self._engine:
            self._engine.dispose()
            self._engine = None
            self._SessionLocal = None


def _apply_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        for pragma in SQLITE_PRAGMAS:
            cursor.execute(pragma)
    finally:
        cursor.close()
