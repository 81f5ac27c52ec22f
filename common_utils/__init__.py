"""
Common utilities for the Customer Portal application
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime.

    Timestamps are stored in naive ``DateTime`` columns, so every comparison
    against a stored value must use this instead of an aware ``datetime.now``.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
