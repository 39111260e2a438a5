"""
Credential store: the persistence collaborator of the registration pipeline.
"""

from typing import Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from registrar.core import PersistenceError, get_logger
from registrar.db.repositories import create_user

logger = get_logger(__name__)


class CredentialStore(Protocol):
    """Persists (email, encoded hash) pairs; email is unique."""

    def save(self, email: str, encoded_hash: str) -> None:
        """Persist a credential or raise PersistenceError."""
        ...


class SqlCredentialStore:
    """CredentialStore writing to the ``users`` table."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def save(self, email: str, encoded_hash: str) -> None:
        with self._session_factory() as session:
            try:
                create_user(session, email=email, password_hash=encoded_hash)
            except IntegrityError as exc:
                session.rollback()
                raise PersistenceError("Email already registered") from exc
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(
                    "Credential insert failed",
                    data={"error": type(exc).__name__},
                )
                raise PersistenceError(
                    f"Database error: {type(exc).__name__}"
                ) from exc
