"""
Registration pipeline.

validate -> hash (timed) -> persist (timed). Each stage's duration is
recorded only when the stage succeeds. Any failure aborts the pipeline and
propagates to the caller; nothing is retried here.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from registrar.auth import PasswordHasher
from registrar.config import Settings
from registrar.core import (
    MetricsRecorder,
    MetricsRegistry,
    RegistrationError,
    RegistryRecorder,
    ValidationError,
    get_logger,
)
from registrar.db.engine import get_session_factory
from registrar.db.repositories import normalize_email
from registrar.db.store import CredentialStore, SqlCredentialStore

logger = get_logger(__name__)

MAX_EMAIL_LENGTH = 255


@dataclass(frozen=True)
class RegistrationRequest:
    """A user's registration submission. The password stays out of repr."""

    email: str
    password: str = field(repr=False)


class RegistrationService:
    """Orchestrates hashing and persistence for a single registration."""

    def __init__(
        self,
        hasher: PasswordHasher,
        store: CredentialStore,
        recorder: MetricsRecorder,
        clock: Callable[[], float] = time.perf_counter,
        password_min_length: int = 8,
        password_max_length: int = 1024,
    ):
        self.hasher = hasher
        self.store = store
        self.recorder = recorder
        self.clock = clock
        self.password_min_length = password_min_length
        self.password_max_length = password_max_length

    def register(self, request: RegistrationRequest) -> None:
        """
        Register a user.

        Raises:
            ValidationError: Missing or invalid email/password.
            RandomnessUnavailableError: No salt could be generated.
            PersistenceError: The store failed or rejected the credential.
        """
        email = self.validate(request)
        domain = email.rsplit("@", 1)[1]

        try:
            encoded_hash = self._hash(request.password)
            self._persist(email, encoded_hash)
        except RegistrationError as exc:
            logger.warning(
                "Registration failed",
                data={
                    "email_domain": domain,
                    "error": type(exc).__name__,
                    "reason": exc.reason,
                },
            )
            raise

        logger.info("User registered", data={"email_domain": domain})

    def validate(self, request: RegistrationRequest) -> str:
        """Check request fields and return the normalised email."""
        email = normalize_email(request.email or "")
        if not email:
            raise ValidationError("Email is required", {"field": "email"})
        if len(email) > MAX_EMAIL_LENGTH:
            raise ValidationError(
                f"Email must be at most {MAX_EMAIL_LENGTH} characters",
                {"field": "email"},
            )
        local, sep, domain = email.partition("@")
        if (
            not sep
            or not local
            or not domain
            or "@" in domain
            or any(c.isspace() for c in email)
        ):
            raise ValidationError("Email address is invalid", {"field": "email"})

        password = request.password or ""
        if not password:
            raise ValidationError("Password is required", {"field": "password"})
        if len(password) < self.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.password_min_length} characters",
                {"field": "password"},
            )
        if len(password) > self.password_max_length:
            raise ValidationError(
                f"Password must be at most {self.password_max_length} characters",
                {"field": "password"},
            )
        # Lone surrogates cannot reach the KDF as UTF-8.
        try:
            password.encode("utf-8")
        except UnicodeEncodeError:
            raise ValidationError(
                "Password contains invalid characters", {"field": "password"}
            ) from None
        return email

    def _hash(self, password: str) -> str:
        start = self.clock()
        encoded_hash = self.hasher.generate_from_password(password)
        self.recorder.observe_hashing(self.clock() - start)
        return encoded_hash

    def _persist(self, email: str, encoded_hash: str) -> None:
        start = self.clock()
        self.store.save(email, encoded_hash)
        self.recorder.observe_persistence(self.clock() - start)


def build_registration_service(settings: Settings, registry: MetricsRegistry) -> RegistrationService:
    """Wire the service from settings: configured hasher, SQL store, registry histograms."""
    return RegistrationService(
        hasher=PasswordHasher(settings.cost_parameters),
        store=SqlCredentialStore(get_session_factory()),
        recorder=RegistryRecorder(registry),
        password_min_length=settings.password_min_length,
        password_max_length=settings.password_max_length,
    )
