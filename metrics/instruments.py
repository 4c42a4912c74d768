"""Tagged metric names and the metric types held by the registry"""
import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple

from .snapshot import Snapshot

DEFAULT_RESERVOIR_SIZE = 1028


@dataclass(frozen=True, order=True)
class MetricName:
    """Metric name plus string tags, identifying one series in the registry.

    Tags are kept sorted by key so that two names built from the same tags in a
    different order are equal, hash alike and export identical label order.
    """
    safe_name: str
    safe_tags: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self):
        if not self.safe_name:
            raise ValueError("Metric name must not be empty")
        object.__setattr__(self, "safe_tags", tuple(sorted(dict(self.safe_tags).items())))

    @classmethod
    def of(cls, name: str, tags: Optional[Mapping[str, str]] = None) -> "MetricName":
        return cls(name, tuple((tags or {}).items()))

    @property
    def tags(self) -> Dict[str, str]:
        return dict(self.safe_tags)

    def __str__(self) -> str:
        if not self.safe_tags:
            return self.safe_name
        tags = ",".join(f"{k}={v}" for k, v in self.safe_tags)
        return f"{self.safe_name}{{{tags}}}"


class Counter:
    """Incrementing and decrementing counter"""

    def __init__(self):
        self._count = 0
        self._lock = threading.Lock()

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    @property
    def count(self) -> int:
        return self._count


class Gauge:
    """Instantaneous value read from a supplier on every access"""

    def __init__(self, supplier: Callable[[], Any]):
        if not callable(supplier):
            raise ValueError("Gauge supplier must be callable")
        self._supplier = supplier

    @property
    def value(self) -> Any:
        return self._supplier()


class _Reservoir:
    """Bounded reservoir keeping the most recent values"""

    def __init__(self, size: int = DEFAULT_RESERVOIR_SIZE):
        self._values = deque(maxlen=size)
        self._count = 0
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._values.append(value)
            self._count += 1

    @property
    def count(self) -> int:
        return self._count

    def snapshot(self) -> Snapshot:
        with self._lock:
            values = list(self._values)
        return Snapshot(values)


class Histogram:
    """Distribution of recorded values"""

    def __init__(self, reservoir_size: int = DEFAULT_RESERVOIR_SIZE):
        self._reservoir = _Reservoir(reservoir_size)

    def update(self, value: float) -> None:
        self._reservoir.update(value)

    @property
    def count(self) -> int:
        return self._reservoir.count

    def snapshot(self) -> Snapshot:
        return self._reservoir.snapshot()


class Timer:
    """Distribution of durations, recorded in nanoseconds"""

    def __init__(self, reservoir_size: int = DEFAULT_RESERVOIR_SIZE):
        self._reservoir = _Reservoir(reservoir_size)

    def update(self, duration_ns: int) -> None:
        if duration_ns < 0:
            return
        self._reservoir.update(duration_ns)

    @contextmanager
    def time(self) -> Iterator[None]:
        """Time the wrapped block"""
        start = time.perf_counter_ns()
        try:
            yield
        finally:
            self.update(time.perf_counter_ns() - start)

    @property
    def count(self) -> int:
        return self._reservoir.count

    def snapshot(self) -> Snapshot:
        return self._reservoir.snapshot()


class Meter:
    """Counts events and their mean rate"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._start = clock()
        self._count = 0
        self._lock = threading.Lock()

    def mark(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    @property
    def count(self) -> int:
        return self._count

    @property
    def mean_rate(self) -> float:
        """Events per second since the meter was created"""
        elapsed = self._clock() - self._start
        if self._count == 0 or elapsed <= 0:
            return 0.0
        return self._count / elapsed
