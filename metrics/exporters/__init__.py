"""Exporters bridging translated families to metric collectors"""
from .prometheus import TritiumCollector, to_prometheus_metric

__all__ = [
    'TritiumCollector',
    'to_prometheus_metric'
]
