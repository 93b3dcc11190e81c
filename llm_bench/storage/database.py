"""Database connection and session management."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..models.benchmark_models import BenchmarkRun, create_tables

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./llm_bench_runs.db"


class DatabaseManager:
    """Manages database connections and sessions for the SQL benchmark store."""

    def __init__(self, database_url: Optional[str] = None, echo: bool = False, **engine_kwargs):
        """
        Initialize database manager.

        Args:
            database_url: Database connection URL. Defaults to a local SQLite file
            echo: Log every SQL statement
            **engine_kwargs: Additional arguments passed to create_engine
        """
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.engine = self._create_engine(echo=echo, **engine_kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

        self._ensure_tables_exist()

    def _create_engine(self, **kwargs):
        """Create SQLAlchemy engine with appropriate configuration."""
        default_kwargs: Dict[str, Any] = {"future": True}

        if self.database_url.startswith("sqlite"):
            default_kwargs.update(
                {
                    "poolclass": StaticPool,
                    "connect_args": {"check_same_thread": False, "timeout": 30},
                }
            )
        elif "postgresql" in self.database_url:
            default_kwargs.update(
                {
                    "pool_size": 10,
                    "max_overflow": 20,
                    "pool_recycle": 3600,
                    "pool_pre_ping": True,
                }
            )

        default_kwargs.update(kwargs)

        engine = create_engine(self.database_url, **default_kwargs)
        self._setup_engine_events(engine)
        return engine

    def _setup_engine_events(self, engine):
        """Set up database engine event listeners."""

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            if "sqlite" in str(engine.url):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA cache_size=10000")
                cursor.close()

    def _ensure_tables_exist(self):
        """Create database tables if they don't exist."""
        try:
            create_tables(self.engine)
            logger.info("Database tables initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database tables: {e}")
            raise

    @contextmanager
    def get_session(self):
        """
        Context manager for database sessions.

        Yields:
            SQLAlchemy session with automatic transaction management
        """
        session: Session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            session.close()

    def safe_url(self) -> str:
        """Database URL without credentials, for logs and health output."""
        return self.database_url.split("@")[-1] if "@" in self.database_url else self.database_url

    def health_check(self) -> Dict[str, Any]:
        """
        Perform database health check.

        Returns:
            Dictionary with health check results
        """
        try:
            with self.get_session() as session:
                result = session.execute(text("SELECT 1")).scalar()
                stats = {"record_count": session.query(BenchmarkRun).count()}
                latest = session.query(BenchmarkRun).order_by(BenchmarkRun.id.desc()).first()
                if latest is not None:
                    stats["latest_benchmark_id"] = latest.id
                    stats["latest_model"] = latest.model

            return {
                "status": "healthy",
                "database_url": self.safe_url(),
                "connection_test": result == 1,
                "statistics": stats,
            }

        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {
                "status": "unhealthy",
                "error": str(e),
                "database_url": self.safe_url(),
            }

    def close(self):
        """Close database engine and connections."""
        if hasattr(self, "engine"):
            self.engine.dispose()
            logger.info("Database connections closed")
