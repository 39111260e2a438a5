"""API routers."""

from registrar.api.health import router as health_router
from registrar.api.metrics import router as metrics_router
from registrar.api.users import router as users_router

__all__ = [
    "health_router",
    "metrics_router",
    "users_router",
]
