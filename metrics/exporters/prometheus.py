"""Prometheus client collector exposing a tagged metric registry"""
from typing import Iterator, List, Optional

from prometheus_client import REGISTRY, CollectorRegistry
from prometheus_client.core import Metric

from config import Config
from logging_config import get_logger, log_error
from metrics.models import FamilyKind, SampleFamily
from metrics.registry import TaggedMetricRegistry
from metrics.translator import UNDERSCORE_TOTAL, MetricTranslator


logger = get_logger(__name__)


def to_prometheus_metric(family: SampleFamily) -> Metric:
    """Convert a sample family into a prometheus_client metric family"""
    name = family.name
    # prometheus_client appends _total to counter families when rendering
    if family.kind is FamilyKind.COUNTER and name.endswith(UNDERSCORE_TOTAL):
        name = name[:-len(UNDERSCORE_TOTAL)]

    metric = Metric(name, family.help_text, family.kind.value)
    for sample in family.samples:
        metric.add_sample(sample.name, sample.labels, sample.value)
    return metric


class TritiumCollector:
    """Custom collector translating the registry on every scrape"""

    def __init__(self, registry: TaggedMetricRegistry, config: Optional[Config] = None):
        self.registry = registry
        self.config = config
        self.translator = MetricTranslator(config)

    def describe(self) -> List[Metric]:
        # Metric names are only known at scrape time
        return []

    def collect(self) -> Iterator[Metric]:
        try:
            families = self.translator.export(self.registry)
        except Exception as e:
            log_error(logger, e, {"event_type": "registry_export_error"})
            return

        for family in families:
            try:
                yield to_prometheus_metric(family)
            except ValueError as e:
                log_error(logger, e, {"family": family.name})

    def register(self, collector_registry: Optional[CollectorRegistry] = None) -> "TritiumCollector":
        """Register with the given collector registry, or the default one"""
        target = collector_registry if collector_registry is not None else REGISTRY
        target.register(self)
        logger.info("Registered Tritium collector", collector_registry=type(target).__name__)
        return self
