"""
Engine and session factory for the credential database.

Both are created lazily from settings and cached per process;
``dispose_engine`` drops them so the next call picks up new settings.
"""

from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from registrar.config import get_settings
from registrar.core import get_logger

logger = get_logger(__name__)

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _ensure_sqlite_directory(database_url: str) -> None:
    database = make_url(database_url).database
    if not database or database == ":memory:":
        return
    Path(database).parent.mkdir(parents=True, exist_ok=True)


def get_engine() -> Engine:
    """Get the credential database engine, creating it on first call."""
    global _engine

    if _engine is None:
        settings = get_settings()
        database_url = settings.effective_database_url

        connect_args = {}
        if settings.is_sqlite:
            _ensure_sqlite_directory(database_url)
            # Registrations are hashed and saved on thread-pool workers.
            connect_args["check_same_thread"] = False

        _engine = create_engine(
            database_url,
            connect_args=connect_args,
            pool_pre_ping=True,
        )
        logger.info("Database engine created", data={"dialect": _engine.dialect.name})

    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Session factory bound to the current engine; one session per save."""
    global _session_factory

    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory


def verify_database_connection() -> bool:
    """Return True if the credential database answers ``SELECT 1``."""
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("Database connection failed", data={"error": type(e).__name__})
        return False


def dispose_engine() -> None:
    """Close pooled connections and forget the engine and session factory."""
    global _engine, _session_factory
    _session_factory = None
    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.info("Database engine disposed")
