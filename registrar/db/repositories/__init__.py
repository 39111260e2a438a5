"""Database repositories for data access."""

from registrar.db.repositories.user import create_user, normalize_email

__all__ = ["create_user", "normalize_email"]
