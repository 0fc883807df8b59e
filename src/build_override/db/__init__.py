"""History database helpers and ORM models."""

from .session import configure_engine, get_engine, get_session, init_db, session_scope
from .models import Base, OverrideAudit, Run

__all__ = [
    "Base",
    "OverrideAudit",
    "Run",
    "configure_engine",
    "get_engine",
    "get_session",
    "init_db",
    "session_scope",
]
