"""Core module with errors, logging and metrics."""

from registrar.core.errors import (
    AppError,
    ErrorCode,
    ErrorResponse,
    MalformedEncodingError,
    PersistenceError,
    RandomnessUnavailableError,
    RegistrationError,
    ValidationError,
)
from registrar.core.logging import get_logger, request_id_ctx, setup_logging
from registrar.core.metrics import (
    Histogram,
    MetricsRecorder,
    MetricsRegistry,
    RegistryRecorder,
    metrics,
)

__all__ = [
    # Errors
    "AppError",
    "ErrorCode",
    "ErrorResponse",
    "MalformedEncodingError",
    "PersistenceError",
    "RandomnessUnavailableError",
    "RegistrationError",
    "ValidationError",
    # Logging
    "get_logger",
    "request_id_ctx",
    "setup_logging",
    # Metrics
    "Histogram",
    "MetricsRecorder",
    "MetricsRegistry",
    "RegistryRecorder",
    "metrics",
]
