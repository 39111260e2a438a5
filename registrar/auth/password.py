"""
Password hashing using Argon2id.

Ties salt generation, key derivation and encoding together for one set of
cost parameters.
"""

from registrar.auth.encoding import encode
from registrar.auth.kdf import derive
from registrar.auth.params import CostParameters
from registrar.auth.salt import generate_salt


class PasswordHasher:
    """Argon2id hasher bound to fixed cost parameters."""

    def __init__(self, params: CostParameters):
        self.params = params

    def generate_from_password(self, password: str) -> str:
        """
        Hash a password with a fresh random salt.

        Args:
            password: Plain text password.

        Returns:
            Encoded Argon2id hash (includes algorithm, parameters and salt).

        Raises:
            RandomnessUnavailableError: If no salt could be generated.
        """
        salt = generate_salt(self.params.salt_length)
        key = derive(password, salt, self.params)
        return encode(self.params, salt, key)

