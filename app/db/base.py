# app/db/base.py

"""
Database Base Class and Timestamp helpers
"""

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite drops tzinfo on round-trip)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models - SINGLE SOURCE OF TRUTH."""
    pass
