"""
Timestamp helpers for table columns.

Timestamps are stored timezone-aware, in UTC.
"""

import datetime

from sqlalchemy import Column, DateTime


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def timestamp_column() -> Column:
    """A fresh ``DateTime(timezone=True)`` column; columns cannot be shared between tables."""
    return Column(DateTime(timezone=True), nullable=False)
