"""Export data models for translated metrics"""
import math
import numbers
from decimal import Decimal
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Tuple


class FamilyKind(Enum):
    """Prometheus metric family types"""
    GAUGE = "gauge"
    COUNTER = "counter"
    SUMMARY = "summary"


@dataclass(frozen=True)
class ExportedSample:
    """Single labeled data point in the exposition format"""
    name: str
    label_names: Tuple[str, ...]
    label_values: Tuple[str, ...]
    value: float

    def __post_init__(self):
        # Accept lists from callers but always store tuples
        object.__setattr__(self, "label_names", tuple(self.label_names))
        object.__setattr__(self, "label_values", tuple(self.label_values))
        if len(self.label_names) != len(self.label_values):
            raise ValueError(
                f"Label arity mismatch for {self.name}: "
                f"{len(self.label_names)} names, {len(self.label_values)} values"
            )

    @property
    def labels(self) -> Dict[str, str]:
        return dict(zip(self.label_names, self.label_values))


@dataclass(frozen=True)
class SampleFamily:
    """Group of samples sharing an exported name, kind and help text"""
    name: str
    kind: FamilyKind
    help_text: str
    samples: Tuple[ExportedSample, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "samples", tuple(self.samples))

    def merged_with(self, other: "SampleFamily") -> "SampleFamily":
        """Return a new family with other's samples appended; kind and help text are kept"""
        return replace(self, samples=self.samples + other.samples)


class GaugeReadingKind(Enum):
    NUMBER = "number"
    BOOLEAN = "boolean"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class GaugeReading:
    """Gauge payload classified into the small set the exporter understands"""
    kind: GaugeReadingKind
    value: float = 0.0
    payload_type: str = "null"

    @classmethod
    def from_value(cls, obj: Any) -> "GaugeReading":
        payload_type = "null" if obj is None else f"{type(obj).__module__}.{type(obj).__qualname__}"

        # bool must be checked first, it is a subclass of int
        if isinstance(obj, bool):
            return cls(GaugeReadingKind.BOOLEAN, 1.0 if obj else 0.0, payload_type)
        if isinstance(obj, (numbers.Real, Decimal)):
            try:
                value = float(obj)
            except OverflowError:
                # too large for a double
                value = math.inf if obj > 0 else -math.inf
            return cls(GaugeReadingKind.NUMBER, value, payload_type)
        return cls(GaugeReadingKind.UNSUPPORTED, payload_type=payload_type)

    @property
    def is_supported(self) -> bool:
        return self.kind is not GaugeReadingKind.UNSUPPORTED
