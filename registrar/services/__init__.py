"""Application services."""

from registrar.services.registration import (
    RegistrationRequest,
    RegistrationService,
    build_registration_service,
)

__all__ = [
    "RegistrationRequest",
    "RegistrationService",
    "build_registration_service",
]
