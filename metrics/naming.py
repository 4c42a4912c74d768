"""Name sanitization for Prometheus metric and label names"""
import re

INVALID_METRIC_NAME = "invalid_prometheus_metric_or_label_name"

_METRIC_NAME_RE = re.compile(r"[^a-zA-Z0-9_]")
_LEADING_CHARS = "_0123456789"


def sanitize_metric_name(name: str) -> str:
    """Sanitize a string so that it matches Prometheus's data model.

    Every character outside ``[a-zA-Z0-9_]`` becomes an underscore and the
    result is lower-cased. Leading underscores and digits and trailing
    underscores are trimmed. Returns ``INVALID_METRIC_NAME`` when nothing
    usable is left (empty or purely numeric input).
    """
    if not name:
        return INVALID_METRIC_NAME

    sanitized = _METRIC_NAME_RE.sub("_", name).lower()

    # no leading underscore or digit, no trailing underscore
    sanitized = sanitized.lstrip(_LEADING_CHARS).rstrip("_")

    if not sanitized:
        return INVALID_METRIC_NAME

    return sanitized
