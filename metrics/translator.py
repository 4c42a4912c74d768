"""Translates a tagged metric registry into Prometheus sample families"""
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from .instruments import Counter, Gauge, Histogram, MetricName, Meter, Timer
from .models import ExportedSample, FamilyKind, GaugeReading, SampleFamily
from .naming import sanitize_metric_name
from .snapshot import Snapshot
from logging_config import get_logger, log_error, log_export


logger = get_logger(__name__)

DEFAULT_REGISTRY_TYPE = "Tritium"
HELP_MESSAGE_FORMAT = "Generated from {registry_type} metric import (metric={metric}, type={metric_class})"

QUANTILE = "quantile"
QUANTILES = ("0.5", "0.75", "0.95", "0.98", "0.99", "0.999")

UNDERSCORE_TOTAL = "_total"
UNDERSCORE_COUNT = "_count"
UNDERSCORE_MIN = "_min"
UNDERSCORE_MAX = "_max"
UNDERSCORE_MEAN = "_mean"
UNDERSCORE_STDDEV = "_stddev"

NANOSECONDS_PER_SECOND = 1e9

LabelPairs = Tuple[Tuple[str, ...], Tuple[str, ...]]


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def _qualified_class_name(obj: Any) -> str:
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


def generate_label_pairs(tags: Mapping[str, Any], reserved: Iterable[str] = ()) -> LabelPairs:
    """Build label names and values from tags.

    Tags with a blank key or value are dropped. Keys are sanitized, values are
    converted with ``str()`` but otherwise passed through. When two keys
    sanitize to the same label name, or to a reserved one, the first wins.
    """
    seen = set(reserved)
    names: List[str] = []
    values: List[str] = []

    for key, value in tags.items():
        if _is_blank(key) or _is_blank(value):
            continue
        label = sanitize_metric_name(key)
        if label in seen:
            logger.debug("Dropping duplicate label", label=label, tag=key)
            continue
        seen.add(label)
        names.append(label)
        values.append(str(value))

    return tuple(names), tuple(values)


def merge_families(families: Iterable[SampleFamily]) -> List[SampleFamily]:
    """Fold families into one entry per exported name.

    The first family seen for a name keeps its kind and help text; later
    families only contribute samples.
    """
    merged: Dict[str, SampleFamily] = {}

    for family in families:
        existing = merged.get(family.name)
        if existing is None:
            merged[family.name] = family
            continue
        if existing.kind is not family.kind:
            logger.debug(
                "Merging families of different kinds",
                family=family.name,
                kept_kind=existing.kind.value,
                merged_kind=family.kind.value,
            )
        merged[family.name] = existing.merged_with(family)

    return list(merged.values())


class MetricTranslator:
    """Converts registry metrics into Prometheus sample families.

    Stateless: every call to ``export`` takes one point-in-time view of the
    registry and builds fresh, immutable families from it.
    """

    def __init__(self, config=None):
        self.config = config
        self.registry_type = config.registry_type if config else DEFAULT_REGISTRY_TYPE

    def export(self, registry) -> List[SampleFamily]:
        """Translate every supported metric in the registry"""
        entries = tuple(registry.get_metrics().items())

        families: List[SampleFamily] = []
        skipped = 0

        for metric_name, metric in entries:
            try:
                translated = self.translate(metric_name, metric)
            except Exception as e:
                log_error(logger, e, {"metric": str(metric_name), "event_type": "metric_translation_error"})
                translated = []
            if not translated:
                skipped += 1
            families.extend(translated)

        merged = merge_families(families)
        log_export(logger, len(merged), sum(len(f.samples) for f in merged), skipped)
        return merged

    def translate(self, metric_name: MetricName, metric: Any) -> List[SampleFamily]:
        """Translate a single metric; unsupported metrics yield an empty list"""
        if isinstance(metric, Counter):
            return self.from_counter(metric_name, metric)
        elif isinstance(metric, Gauge):
            return self.from_gauge(metric_name, metric)
        elif isinstance(metric, Histogram):
            return self.from_histogram(metric_name, metric)
        elif isinstance(metric, Timer):
            return self.from_timer(metric_name, metric)
        elif isinstance(metric, Meter):
            return self.from_meter(metric_name, metric)

        logger.warning(
            "Unexpected type for metric",
            metric=metric_name.safe_name,
            metric_class="null" if metric is None else _qualified_class_name(metric),
            event_type="unexpected_metric_type",
        )
        return []

    def help_message(self, metric_name: MetricName, metric: Any) -> str:
        return HELP_MESSAGE_FORMAT.format(
            registry_type=self.registry_type,
            metric=metric_name.safe_name,
            metric_class=_qualified_class_name(metric),
        )

    def from_counter(self, metric_name: MetricName, counter: Counter) -> List[SampleFamily]:
        """Export a counter as a Prometheus gauge, counters can go down"""
        names, values = generate_label_pairs(metric_name.tags)
        name = sanitize_metric_name(metric_name.safe_name)
        sample = ExportedSample(name, names, values, float(counter.count))
        return [SampleFamily(name, FamilyKind.GAUGE, self.help_message(metric_name, counter), (sample,))]

    def from_gauge(self, metric_name: MetricName, gauge: Gauge) -> List[SampleFamily]:
        """Export numeric and boolean gauges; anything else is skipped"""
        name = sanitize_metric_name(metric_name.safe_name)

        try:
            reading = GaugeReading.from_value(gauge.value)
        except Exception as e:
            log_error(logger, e, {"metric": name, "event_type": "gauge_read_error"})
            return []

        if not reading.is_supported:
            logger.debug("Invalid type for gauge", metric=name, metric_class=reading.payload_type)
            return []

        names, values = generate_label_pairs(metric_name.tags)
        sample = ExportedSample(name, names, values, reading.value)
        return [SampleFamily(name, FamilyKind.GAUGE, self.help_message(metric_name, gauge), (sample,))]

    def from_histogram(self, metric_name: MetricName, histogram: Histogram) -> List[SampleFamily]:
        return self.from_snapshot_and_count(
            metric_name, histogram, histogram.snapshot(), histogram.count, 1.0
        )

    def from_timer(self, metric_name: MetricName, timer: Timer) -> List[SampleFamily]:
        """Export a timer as a summary with quantiles in seconds"""
        return self.from_snapshot_and_count(
            metric_name, timer, timer.snapshot(), timer.count, 1.0 / NANOSECONDS_PER_SECOND
        )

    def from_meter(self, metric_name: MetricName, meter: Meter) -> List[SampleFamily]:
        """Export a meter as a Prometheus counter"""
        names, values = generate_label_pairs(metric_name.tags)
        name = sanitize_metric_name(metric_name.safe_name) + UNDERSCORE_TOTAL
        sample = ExportedSample(name, names, values, float(meter.count))
        return [SampleFamily(name, FamilyKind.COUNTER, self.help_message(metric_name, meter), (sample,))]

    def from_snapshot_and_count(
        self,
        metric_name: MetricName,
        metric: Any,
        snapshot: Snapshot,
        count: int,
        factor: float,
    ) -> List[SampleFamily]:
        """Export a snapshot as a Prometheus summary.

        Only the quantile values are scaled by ``factor``; count, min, max,
        mean and stddev are exported as recorded.
        """
        names, values = generate_label_pairs(metric_name.tags, reserved=(QUANTILE,))
        name = sanitize_metric_name(metric_name.safe_name)

        quantile_names = (QUANTILE,) + names
        samples = [
            ExportedSample(
                name,
                quantile_names,
                (quantile,) + values,
                snapshot.value_at_quantile(float(quantile)) * factor,
            )
            for quantile in QUANTILES
        ]

        samples.extend([
            ExportedSample(name + UNDERSCORE_COUNT, names, values, float(count)),
            ExportedSample(name + UNDERSCORE_MIN, names, values, float(snapshot.min)),
            ExportedSample(name + UNDERSCORE_MAX, names, values, float(snapshot.max)),
            ExportedSample(name + UNDERSCORE_MEAN, names, values, float(snapshot.mean)),
            ExportedSample(name + UNDERSCORE_STDDEV, names, values, float(snapshot.stddev)),
        ])

        return [SampleFamily(name, FamilyKind.SUMMARY, self.help_message(metric_name, metric), tuple(samples))]
