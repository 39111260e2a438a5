"""Cryptographically secure salt generation."""

import secrets

from registrar.core.errors import RandomnessUnavailableError


def generate_salt(length: int) -> bytes:
    """
    Generate a random salt from the OS CSPRNG.

    Args:
        length: Number of bytes to return.

    Returns:
        Exactly ``length`` random bytes.

    Raises:
        ValueError: If ``length`` is not a positive integer.
        RandomnessUnavailableError: If the entropy source cannot be read.
    """
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        raise ValueError("Salt length must be a positive integer")

    try:
        salt = secrets.token_bytes(length)
    except (OSError, NotImplementedError) as exc:
        raise RandomnessUnavailableError(
            f"Entropy source unavailable: {type(exc).__name__}"
        ) from exc

    if len(salt) != length:
        raise RandomnessUnavailableError("Entropy source returned a short read")
    return salt
