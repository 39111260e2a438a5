"""Argon2id cost parameters."""

from dataclasses import dataclass

UINT32_MAX = 2**32 - 1
UINT8_MAX = 2**8 - 1

# Lower bounds imposed by Argon2 itself (RFC 9106).
MIN_SALT_LENGTH = 8
MIN_KEY_LENGTH = 4
MIN_MEMORY_PER_LANE_KIB = 8


@dataclass(frozen=True)
class CostParameters:
    """Argon2id tuning knobs, encoded into every hash they produce.

    Attributes:
        memory_kib: Memory cost in KiB.
        iterations: Time cost (passes over memory).
        parallelism: Number of lanes.
        salt_length: Salt size in bytes.
        key_length: Derived key size in bytes.
    """

    memory_kib: int
    iterations: int
    parallelism: int
    salt_length: int
    key_length: int

    def __post_init__(self) -> None:
        for name, limit in (
            ("memory_kib", UINT32_MAX),
            ("iterations", UINT32_MAX),
            ("parallelism", UINT8_MAX),
            ("salt_length", UINT32_MAX),
            ("key_length", UINT32_MAX),
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer")
            if not 0 < value <= limit:
                raise ValueError(f"{name} must be between 1 and {limit}")

        if self.salt_length < MIN_SALT_LENGTH:
            raise ValueError(f"salt_length must be at least {MIN_SALT_LENGTH}")
        if self.key_length < MIN_KEY_LENGTH:
            raise ValueError(f"key_length must be at least {MIN_KEY_LENGTH}")
        if self.memory_kib < MIN_MEMORY_PER_LANE_KIB * self.parallelism:
            raise ValueError(
                f"memory_kib must be at least {MIN_MEMORY_PER_LANE_KIB} * parallelism"
            )


DEFAULT_COST_PARAMETERS = CostParameters(
    memory_kib=64 * 1024,
    iterations=3,
    parallelism=2,
    salt_length=16,
    key_length=32,
)
