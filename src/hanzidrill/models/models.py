"""Database models for progress persistence."""
from sqlalchemy import JSON, Column, Integer, String

from hanzidrill.models.base import Base, TimestampMixin


class ProgressSnapshot(Base, TimestampMixin):
    """Serialized StudentProgress, one row per storage key."""

    __tablename__ = "progress_snapshots"

    id = Column(Integer, primary_key=True)
    storage_key = Column(String, unique=True, nullable=False, index=True)
    payload = Column(JSON, nullable=False)
