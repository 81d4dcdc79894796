"""Shared FastAPI dependencies."""

from lms.clock import Clock, utc_now
from lms.database import get_session as _get_session

get_db = _get_session


def get_clock() -> Clock:
    """Time source for services; overridden in tests."""
    return utc_now
