"""
PHC-style encoding of Argon2id hashes.

Format::

    $argon2id$v=19$m=65536,t=3,p=2$<salt>$<key>

Salt and key use standard base64 without ``=`` padding. This string is the
only persisted artifact, so ``decode`` is strict: anything it accepts, a
verifier can reproduce bit for bit.
"""

import base64
import binascii
import re
from typing import NamedTuple

from registrar.auth.kdf import ALGORITHM, VERSION
from registrar.auth.params import CostParameters
from registrar.core.errors import MalformedEncodingError

# Argon2 versions 1.0 and 1.3
KNOWN_VERSIONS = frozenset({0x10, 0x13})

# Up to 10 digits, the width of a uint32.
_VERSION_RE = re.compile(r"v=([1-9][0-9]{0,9})")
_PARAMS_RE = re.compile(
    r"m=([1-9][0-9]{0,9}),t=([1-9][0-9]{0,9}),p=([1-9][0-9]{0,9})"
)
_B64_RE = re.compile(r"[A-Za-z0-9+/]+")


class DecodedHash(NamedTuple):
    """Components of an encoded hash."""

    algorithm: str
    version: int
    params: CostParameters
    salt: bytes
    key: bytes


def b64encode_nopad(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii").rstrip("=")


def b64decode_nopad(segment: str, field: str) -> bytes:
    """Decode unpadded standard base64, rejecting non-canonical input."""
    if not segment or not _B64_RE.fullmatch(segment) or len(segment) % 4 == 1:
        raise MalformedEncodingError(f"Invalid base64 in {field} field")
    try:
        data = base64.b64decode(segment + "=" * (-len(segment) % 4), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedEncodingError(f"Invalid base64 in {field} field") from exc
    # Non-zero trailing bits decode fine but would not re-encode identically.
    if b64encode_nopad(data) != segment:
        raise MalformedEncodingError(f"Non-canonical base64 in {field} field")
    return data


def encode(
    params: CostParameters, salt: bytes, key: bytes, version: int = VERSION
) -> str:
    """
    Serialize cost parameters, salt and key into an encoded hash.

    Args:
        params: Cost parameters used for derivation.
        salt: Salt bytes (``params.salt_length`` long).
        key: Derived key bytes (``params.key_length`` long).
        version: Argon2 version number.

    Returns:
        ``$argon2id$v=<version>$m=<m>,t=<t>,p=<p>$<salt>$<key>``
    """
    if len(salt) != params.salt_length:
        raise ValueError("Salt length does not match cost parameters")
    if len(key) != params.key_length:
        raise ValueError("Key length does not match cost parameters")
    if version not in KNOWN_VERSIONS:
        raise ValueError(f"Unsupported Argon2 version: {version}")

    return (
        f"${ALGORITHM}$v={version}"
        f"$m={params.memory_kib},t={params.iterations},p={params.parallelism}"
        f"${b64encode_nopad(salt)}${b64encode_nopad(key)}"
    )


def decode(encoded: str) -> DecodedHash:
    """
    Parse an encoded hash back into its components.

    Raises:
        MalformedEncodingError: On wrong field count, unknown algorithm or
            version, invalid numeric fields, or invalid base64. The message
            names the field, never its contents.
    """
    if not isinstance(encoded, str) or not encoded.startswith("$"):
        raise MalformedEncodingError("Encoded hash must start with '$'")

    fields = encoded[1:].split("$")
    if len(fields) != 5:
        raise MalformedEncodingError(
            f"Expected 5 fields, found {len(fields)}"
        )
    algorithm, version_field, params_field, salt_field, key_field = fields

    if algorithm != ALGORITHM:
        raise MalformedEncodingError("Unknown algorithm tag")

    match = _VERSION_RE.fullmatch(version_field)
    if not match:
        raise MalformedEncodingError("Invalid version field")
    version = int(match.group(1))
    if version not in KNOWN_VERSIONS:
        raise MalformedEncodingError("Unsupported version")

    match = _PARAMS_RE.fullmatch(params_field)
    if not match:
        raise MalformedEncodingError("Invalid parameter field")
    memory_kib, iterations, parallelism = (int(g) for g in match.groups())

    salt = b64decode_nopad(salt_field, "salt")
    key = b64decode_nopad(key_field, "key")

    try:
        params = CostParameters(
            memory_kib=memory_kib,
            iterations=iterations,
            parallelism=parallelism,
            salt_length=len(salt),
            key_length=len(key),
        )
    except ValueError as exc:
        raise MalformedEncodingError(f"Parameters out of range: {exc}") from exc

    return DecodedHash(algorithm, version, params, salt, key)
