"""Point-in-time statistical snapshots of recorded value distributions"""
import math
from typing import Iterable, Tuple


class Snapshot:
    """Immutable view over a sorted set of recorded values.

    Quantiles use the nearest-rank method: the value at 1-based rank
    ``floor(q * n + 0.5)`` (at least 1) of the sorted values.
    """

    def __init__(self, values: Iterable[float]):
        self._values: Tuple[float, ...] = tuple(sorted(values))

    @property
    def values(self) -> Tuple[float, ...]:
        return self._values

    @property
    def size(self) -> int:
        return len(self._values)

    @property
    def count(self) -> int:
        return len(self._values)

    def value_at_quantile(self, quantile: float) -> float:
        """Return the recorded value at the given quantile (0.0 to 1.0)"""
        if math.isnan(quantile) or quantile < 0.0 or quantile > 1.0:
            raise ValueError(f"{quantile} is not in [0..1]")

        if not self._values:
            return 0.0

        rank = max(1, int(quantile * len(self._values) + 0.5))
        rank = min(rank, len(self._values))
        return float(self._values[rank - 1])

    @property
    def min(self) -> float:
        return float(self._values[0]) if self._values else 0.0

    @property
    def max(self) -> float:
        return float(self._values[-1]) if self._values else 0.0

    @property
    def mean(self) -> float:
        if not self._values:
            return 0.0
        return math.fsum(self._values) / len(self._values)

    @property
    def stddev(self) -> float:
        """Population standard deviation"""
        if len(self._values) <= 1:
            return 0.0
        mean = self.mean
        variance = math.fsum((v - mean) ** 2 for v in self._values) / len(self._values)
        return math.sqrt(variance)

    def __repr__(self) -> str:
        return f"Snapshot(size={self.size}, min={self.min}, max={self.max}, mean={self.mean})"
