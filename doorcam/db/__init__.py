"""Database package."""

from .base import Base
from .models import ACCESS_STATUSES, AccessRecord, StoredBlob
from .session import make_engine, make_session_factory, session_scope

__all__ = [
    "ACCESS_STATUSES",
    "AccessRecord",
    "Base",
    "StoredBlob",
    "make_engine",
    "make_session_factory",
    "session_scope",
]
