"""
In-process latency histograms for the registration pipeline.

The pipeline never touches the registry directly; it is handed a
``MetricsRecorder`` so tests can substitute a fake.
"""

from __future__ import annotations

import bisect
import math
import threading
from collections.abc import Sequence
from typing import Any, Protocol

GENERATE_HASH_DURATION = "generate_hash_duration_seconds"
SAVE_USER_DURATION = "save_user_duration_seconds"

GENERATE_HASH_BUCKETS = (0.05, 0.06, 0.07, 0.08, 0.09, 0.1, 0.11, 0.12, 0.13, 0.14, 0.15)
SAVE_USER_BUCKETS = (0.01, 0.02, 0.03, 0.04, 0.05, 0.06, 0.07, 0.08, 0.09, 0.1)


class Histogram:
    """Thread-safe bucketed histogram with Prometheus-style upper bounds."""

    def __init__(self, name: str, help: str, buckets: Sequence[float]) -> None:
        bounds = sorted(float(b) for b in buckets)
        if not bounds:
            raise ValueError("Histogram requires at least one bucket")
        if len(set(bounds)) != len(bounds):
            raise ValueError("Histogram buckets must be unique")
        if bounds[-1] != math.inf:
            bounds.append(math.inf)

        self.name = name
        self.help = help
        self._bounds = tuple(bounds)
        self._lock = threading.Lock()
        self._counts = [0] * len(self._bounds)
        self._sum = 0.0

    @property
    def buckets(self) -> tuple[float, ...]:
        return self._bounds

    def observe(self, value: float) -> None:
        """Record one observation (seconds)."""
        # Upper bounds are inclusive: a value equal to a bound lands in it.
        index = bisect.bisect_left(self._bounds, value)
        with self._lock:
            self._counts[index] += 1
            self._sum += value

    @property
    def count(self) -> int:
        with self._lock:
            return sum(self._counts)

    def snapshot(self) -> dict[str, Any]:
        """Return cumulative bucket counts, sum and count."""
        with self._lock:
            counts = list(self._counts)
            total = self._sum

        cumulative: dict[str, int] = {}
        running = 0
        for bound, n in zip(self._bounds, counts):
            running += n
            cumulative["+Inf" if bound == math.inf else repr(bound)] = running

        return {
            "help": self.help,
            "buckets": cumulative,
            "sum": total,
            "count": running,
        }


class MetricsRegistry:
    """Thread-safe registry of named histograms."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._histograms: dict[str, Histogram] = {}

    def histogram(self, name: str, help: str, buckets: Sequence[float]) -> Histogram:
        """Register a histogram, or return the existing one with that name."""
        with self._lock:
            existing = self._histograms.get(name)
            if existing is not None:
                return existing
            hist = Histogram(name, help, buckets)
            self._histograms[name] = hist
            return hist

    def get_histogram(self, name: str) -> Histogram | None:
        with self._lock:
            return self._histograms.get(name)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Return a snapshot of every registered histogram."""
        with self._lock:
            histograms = list(self._histograms.values())
        return {"histograms": {h.name: h.snapshot() for h in histograms}}


class MetricsRecorder(Protocol):
    """Latency sink for the two timed registration stages."""

    def observe_hashing(self, seconds: float) -> None: ...

    def observe_persistence(self, seconds: float) -> None: ...


class RegistryRecorder:
    """MetricsRecorder backed by histograms in a MetricsRegistry."""

    def __init__(self, registry: MetricsRegistry) -> None:
        self.hashing = registry.histogram(
            GENERATE_HASH_DURATION,
            "Duration to generate argon2 hash for the user.",
            GENERATE_HASH_BUCKETS,
        )
        self.persistence = registry.histogram(
            SAVE_USER_DURATION,
            "Duration to save user into the database.",
            SAVE_USER_BUCKETS,
        )

    def observe_hashing(self, seconds: float) -> None:
        self.hashing.observe(seconds)

    def observe_persistence(self, seconds: float) -> None:
        self.persistence.observe(seconds)


metrics = MetricsRegistry()
