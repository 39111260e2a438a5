"""
Argon2id key derivation.

Argon2id combines Argon2i (data-independent memory access, side-channel
resistant) and Argon2d (data-dependent access, GPU resistant). The raw
derivation is used here so that the encoding step stays under our control.
"""

from argon2.low_level import ARGON2_VERSION, Type, hash_secret_raw

from registrar.auth.params import CostParameters

ALGORITHM = "argon2id"
VERSION = ARGON2_VERSION  # 0x13


def derive(password: bytes | str, salt: bytes, params: CostParameters) -> bytes:
    """
    Derive a key from a password with Argon2id.

    Deterministic: the same (password, salt, params) always yields the same
    key, which is what makes later verification possible.

    Args:
        password: Password bytes; ``str`` is encoded as UTF-8.
        salt: Salt of exactly ``params.salt_length`` bytes.
        params: Cost parameters.

    Returns:
        ``params.key_length`` bytes of derived key.
    """
    if isinstance(password, str):
        password = password.encode("utf-8")
    if len(salt) != params.salt_length:
        raise ValueError("Salt length does not match cost parameters")

    return hash_secret_raw(
        secret=password,
        salt=salt,
        time_cost=params.iterations,
        memory_cost=params.memory_kib,
        parallelism=params.parallelism,
        hash_len=params.key_length,
        type=Type.ID,
        version=VERSION,
    )
