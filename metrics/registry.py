"""Tagged metric registry holding counters, gauges, histograms, timers and meters"""
import threading
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Type, TypeVar

from .instruments import Counter, Gauge, Histogram, MetricName, Meter, Timer
from logging_config import get_logger


logger = get_logger(__name__)

M = TypeVar("M")


class TaggedMetricRegistry:
    """Thread-safe registry of metrics keyed by name and tags"""

    def __init__(self):
        self._metrics: Dict[MetricName, Any] = {}
        self._lock = threading.RLock()

    def counter(self, name: MetricName) -> Counter:
        return self._get_or_add(name, Counter, Counter)

    def histogram(self, name: MetricName) -> Histogram:
        return self._get_or_add(name, Histogram, Histogram)

    def timer(self, name: MetricName) -> Timer:
        return self._get_or_add(name, Timer, Timer)

    def meter(self, name: MetricName) -> Meter:
        return self._get_or_add(name, Meter, Meter)

    def gauge(self, name: MetricName, supplier: Callable[[], Any]) -> Gauge:
        """Register a gauge reading from supplier, or return the existing one"""
        return self._get_or_add(name, Gauge, lambda: Gauge(supplier))

    def register(self, name: MetricName, metric: Any) -> Any:
        """Register an arbitrary metric object, returning the one already held if present"""
        if metric is None:
            raise ValueError(f"Cannot register None for {name}")

        with self._lock:
            existing = self._metrics.get(name)
            if existing is not None:
                return existing
            self._metrics[name] = metric

        logger.debug("Registered metric", metric=str(name), metric_class=type(metric).__name__)
        return metric

    def remove(self, name: MetricName) -> bool:
        with self._lock:
            return self._metrics.pop(name, None) is not None

    def get_metrics(self) -> Mapping[MetricName, Any]:
        """Point-in-time, read-only view of all metrics, ordered by name then tags"""
        with self._lock:
            items = sorted(self._metrics.items(), key=lambda item: item[0])
        return MappingProxyType(dict(items))

    def __len__(self) -> int:
        return len(self._metrics)

    def _get_or_add(self, name: MetricName, kind: Type[M], factory: Callable[[], M]) -> M:
        with self._lock:
            existing = self._metrics.get(name)
            if existing is None:
                existing = factory()
                self._metrics[name] = existing
                logger.debug("Registered metric", metric=str(name), metric_class=kind.__name__)

        if not isinstance(existing, kind):
            raise ValueError(
                f"Metric name already used for different metric type: {name} "
                f"(existing={type(existing).__name__}, requested={kind.__name__})"
            )
        return existing
