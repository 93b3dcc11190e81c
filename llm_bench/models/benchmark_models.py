"""Database models for benchmark run storage.

This module defines the SQLAlchemy table backing the SQL benchmark store.
Result payloads are stored denormalized as JSON; the columns the dashboard
filters and sorts on are kept as first-class columns.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class BenchmarkRun(Base):
    """One persisted benchmark run.

    The primary key uses AUTOINCREMENT on SQLite (sequences elsewhere) so
    ids of deleted runs are never handed out again.
    """

    __tablename__ = "benchmark_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Run configuration
    url = Column(Text, nullable=False, doc="Target endpoint under test")
    user = Column(Integer, nullable=False, doc="Concurrent virtual users")
    spawnrate = Column(Integer, nullable=False)
    duration = Column(Integer, nullable=False, doc="Run length in seconds")
    model = Column(String(255), nullable=True, doc="Model name, groups versions")
    tokenizer = Column(String(255), nullable=True)
    dataset = Column(String(255), nullable=False)

    # Annotations (the only mutable columns)
    notes = Column(Text, nullable=True)
    favorite = Column(Boolean, nullable=False, default=False)

    # Outcome
    status = Column(String(50), nullable=False)
    results = Column(JSON, nullable=False, doc="Validated engine results payload")

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint('"user" > 0', name="positive_user"),
        CheckConstraint("spawnrate > 0", name="positive_spawnrate"),
        CheckConstraint("duration > 0", name="positive_duration"),
        Index("idx_benchmarks_model", "model"),
        Index("idx_benchmarks_created_at", "created_at"),
        Index("idx_benchmarks_favorite", "favorite"),
        Index("idx_benchmarks_model_created", "model", "created_at"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<BenchmarkRun(id={self.id}, model='{self.model}', status='{self.status}')>"

    def to_dict(self) -> Dict[str, Any]:
        """Convert run to a dict accepted by ``BenchmarkRecord``."""
        created_at = self.created_at
        if created_at is not None and created_at.tzinfo is None:
            # SQLite drops the offset; values are always written in UTC
            created_at = created_at.replace(tzinfo=timezone.utc)
        return {
            "id": self.id,
            "url": self.url,
            "user": self.user,
            "spawnrate": self.spawnrate,
            "duration": self.duration,
            "model": self.model,
            "tokenizer": self.tokenizer,
            "dataset": self.dataset,
            "notes": self.notes,
            "favorite": bool(self.favorite),
            "status": self.status,
            "results": self.results,
            "created_at": created_at,
        }


def create_tables(engine):
    """Create all tables in the database."""
    Base.metadata.create_all(engine)


def drop_tables(engine):
    """Drop all tables from the database."""
    Base.metadata.drop_all(engine)
