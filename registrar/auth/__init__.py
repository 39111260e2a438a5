"""Password hashing: salt, Argon2id derivation and hash encoding."""

from registrar.auth.encoding import DecodedHash, decode, encode
from registrar.auth.kdf import ALGORITHM, VERSION, derive
from registrar.auth.params import DEFAULT_COST_PARAMETERS, CostParameters
from registrar.auth.password import PasswordHasher
from registrar.auth.salt import generate_salt

__all__ = [
    # Parameters
    "CostParameters",
    "DEFAULT_COST_PARAMETERS",
    # Primitives
    "generate_salt",
    "derive",
    "encode",
    "decode",
    "DecodedHash",
    "ALGORITHM",
    "VERSION",
    # Hasher
    "PasswordHasher",
]
