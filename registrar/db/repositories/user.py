"""
User repository for database operations.
"""

from sqlalchemy.orm import Session

from registrar.db.models import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


def create_user(db: Session, email: str, password_hash: str) -> User:
    """
    Insert a new credential row.

    Args:
        db: Database session.
        email: Unique email address.
        password_hash: Encoded Argon2id hash.

    Returns:
        Created User object.

    Raises:
        sqlalchemy.exc.IntegrityError: If the email is already registered.
    """
    user = User(email=normalize_email(email), password_hash=password_hash)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
