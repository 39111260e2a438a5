import gc
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config

from registrar.auth import CostParameters, PasswordHasher
from registrar.core import MetricsRegistry, PersistenceError, RegistryRecorder
from registrar.services import RegistrationService

# Cheap parameters for tests that are not about the deployment cost itself.
FAST_PARAMS = CostParameters(
    memory_kib=1024,
    iterations=1,
    parallelism=1,
    salt_length=16,
    key_length=32,
)

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class FakeStore:
    """In-memory credential store with a unique email constraint."""

    def __init__(self, unique: bool = True):
        self.unique = unique
        self.calls: list[tuple[str, str]] = []
        self.rows: dict[str, str] = {}

    def save(self, email: str, encoded_hash: str) -> None:
        self.calls.append((email, encoded_hash))
        if self.unique and email in self.rows:
            raise PersistenceError("Email already registered")
        self.rows[email] = encoded_hash


class FailingStore:
    def __init__(self):
        self.calls = 0

    def save(self, email: str, encoded_hash: str) -> None:
        self.calls += 1
        raise PersistenceError("Database error: OperationalError")


class FakeRecorder:
    def __init__(self):
        self.hashing: list[float] = []
        self.persistence: list[float] = []

    def observe_hashing(self, seconds: float) -> None:
        self.hashing.append(seconds)

    def observe_persistence(self, seconds: float) -> None:
        self.persistence.append(seconds)


@pytest.fixture
def fast_params():
    return FAST_PARAMS


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def fake_recorder():
    return FakeRecorder()


@pytest.fixture
def service(fake_store, fake_recorder):
    """Registration service with fast hashing and in-memory collaborators."""
    return RegistrationService(
        hasher=PasswordHasher(FAST_PARAMS),
        store=fake_store,
        recorder=fake_recorder,
    )


@pytest.fixture
def registry():
    return MetricsRegistry()


@pytest.fixture
def registry_recorder(registry):
    return RegistryRecorder(registry)


def apply_migrations(db_url: str) -> None:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    command.upgrade(cfg, "head")


def _reset_db_state() -> None:
    from registrar.config import get_settings
    from registrar.db import dispose_engine

    dispose_engine()
    get_settings.cache_clear()


def stored_users(session) -> list:
    """All rows in the users table, oldest first."""
    from sqlalchemy import select

    from registrar.db import User

    session.expire_all()
    return list(session.scalars(select(User).order_by(User.created_at)))


@pytest.fixture
def db_url(tmp_path, monkeypatch):
    """Point settings at a fresh, migrated SQLite database."""
    url = f"sqlite:///{tmp_path / 'test.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("DATABASE_URL_POSTGRES", "")
    monkeypatch.setenv("ARGON2_MEMORY_KIB", str(FAST_PARAMS.memory_kib))
    monkeypatch.setenv("ARGON2_ITERATIONS", str(FAST_PARAMS.iterations))
    monkeypatch.setenv("ARGON2_PARALLELISM", str(FAST_PARAMS.parallelism))
    _reset_db_state()

    apply_migrations(url)

    yield url

    _reset_db_state()
    # Release SQLite file handles
    gc.collect()


@pytest.fixture
def db_session(db_url):
    from registrar.db import get_session_factory

    session = get_session_factory()()
    yield session
    session.close()
