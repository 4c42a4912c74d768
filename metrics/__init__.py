"""Tagged metric registry and its translation into Prometheus sample families"""
from .instruments import Counter, Gauge, Histogram, Meter, MetricName, Timer
from .models import ExportedSample, FamilyKind, SampleFamily
from .naming import INVALID_METRIC_NAME, sanitize_metric_name
from .registry import TaggedMetricRegistry
from .translator import MetricTranslator

__all__ = [
    'Counter',
    'Gauge',
    'Histogram',
    'Meter',
    'MetricName',
    'Timer',
    'ExportedSample',
    'FamilyKind',
    'SampleFamily',
    'INVALID_METRIC_NAME',
    'sanitize_metric_name',
    'TaggedMetricRegistry',
    'MetricTranslator'
]
