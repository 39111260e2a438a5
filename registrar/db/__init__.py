"""Database models, engine and credential store."""

from registrar.db.base import Base, TimestampMixin
from registrar.db.engine import (
    dispose_engine,
    get_engine,
    get_session_factory,
    verify_database_connection,
)
from registrar.db.models import User
from registrar.db.store import CredentialStore, SqlCredentialStore

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Engine
    "get_engine",
    "get_session_factory",
    "verify_database_connection",
    "dispose_engine",
    # Models
    "User",
    # Store
    "CredentialStore",
    "SqlCredentialStore",
]
