"""Tests for the prometheus_client collector bridge"""
from unittest.mock import patch
import pytest
from prometheus_client import CollectorRegistry, generate_latest

from metrics.exporters.prometheus import TritiumCollector, to_prometheus_metric
from metrics.instruments import MetricName
from metrics.models import ExportedSample, FamilyKind, SampleFamily
from metrics.naming import INVALID_METRIC_NAME
from metrics.registry import TaggedMetricRegistry


METRIC_1 = MetricName.of("name_1")
METRIC_2 = MetricName.of("name_2", {"key_1": "val_1"})
METRIC_3 = MetricName.of("name_3", {"key_1": "val_1", "key_2": "val_2"})
METRIC_4 = MetricName.of("name_4")
METRIC_5 = MetricName.of("name_5")


class TestTritiumCollector:
    """End-to-end checks through a prometheus_client collector registry"""

    def setup_method(self):
        self.collector_registry = CollectorRegistry()
        self.metric_registry = TaggedMetricRegistry()
        TritiumCollector(self.metric_registry).register(self.collector_registry)

    def get_output(self) -> str:
        return generate_latest(self.collector_registry).decode("utf-8")

    def test_describe_is_empty(self):
        assert TritiumCollector(self.metric_registry).describe() == []

    def test_counter(self):
        for name in (METRIC_1, METRIC_2, METRIC_3):
            self.metric_registry.counter(name).inc()

        assert self.collector_registry.get_sample_value("name_1") == 1.0
        assert self.collector_registry.get_sample_value("name_2", {"key_1": "val_1"}) == 1.0
        assert self.collector_registry.get_sample_value(
            "name_3", {"key_1": "val_1", "key_2": "val_2"}) == 1.0

        output = self.get_output()
        assert "# TYPE name_1 gauge" in output
        assert "name_1 1.0" in output
        assert 'name_2{key_1="val_1"} 1.0' in output
        assert 'name_3{key_1="val_1",key_2="val_2"} 1.0' in output

    def test_gauge(self):
        self.metric_registry.gauge(METRIC_1, lambda: 1234)
        self.metric_registry.gauge(METRIC_2, lambda: 1234)
        self.metric_registry.gauge(METRIC_3, lambda: 1.234)
        self.metric_registry.gauge(METRIC_4, lambda: 0.1234)
        self.metric_registry.gauge(METRIC_5, lambda: True)

        assert self.collector_registry.get_sample_value("name_1") == 1234.0
        assert self.collector_registry.get_sample_value("name_4") == 0.1234
        assert self.collector_registry.get_sample_value("name_5") == 1.0

        output = self.get_output()
        assert "name_1 1234.0" in output
        assert 'name_2{key_1="val_1"} 1234.0' in output
        assert 'name_3{key_1="val_1",key_2="val_2"} 1.234' in output
        assert "name_4 0.1234" in output
        assert "name_5 1.0" in output

    @pytest.mark.parametrize("payload", ["invalid", None])
    def test_invalid_gauge_value(self, payload):
        self.metric_registry.gauge(METRIC_1, lambda: payload)

        assert self.collector_registry.get_sample_value("name_1") is None

    def test_histogram(self):
        histogram = self.metric_registry.histogram(METRIC_2)
        for i in range(100):
            histogram.update(i)

        assert self.collector_registry.get_sample_value("name_2_count", {"key_1": "val_1"}) == 100.0
        for q in (0.75, 0.95, 0.98, 0.99):
            value = self.collector_registry.get_sample_value(
                "name_2", {"quantile": str(q), "key_1": "val_1"})
            assert value == pytest.approx((q - 0.01) * 100)

        assert "# TYPE name_2 summary" in self.get_output()

    def test_meter(self):
        meter = self.metric_registry.meter(METRIC_1)
        meter.mark()
        meter.mark()

        assert self.collector_registry.get_sample_value("name_1_total") == 2.0

        output = self.get_output()
        assert "# TYPE name_1_total counter" in output
        assert "name_1_total 2.0" in output

    def test_timer(self):
        timer = self.metric_registry.timer(METRIC_1)
        timer.update(2_000_000)

        assert self.collector_registry.get_sample_value("name_1", {"quantile": "0.99"}) > 0.001
        assert self.collector_registry.get_sample_value("name_1_count") == 1.0
        assert "name_1_count 1.0" in self.get_output()

    def test_metric_names(self):
        names = {
            "service-name": "service_name",
            "Stack": "stack",
            "$Host": "host",
            "32metricName": "metricname",
            "3metr1c": "metr1c",
            "1234": INVALID_METRIC_NAME,
            "response_code_": "response_code",
            "dirty:Label": "dirty_label",
            "foo.service": "foo_service",
            "myservice": "myservice",
        }
        for raw in names:
            self.metric_registry.counter(MetricName.of(raw)).inc()

        for exported in names.values():
            assert self.collector_registry.get_sample_value(exported) == 1.0

        self.metric_registry.counter(MetricName.of("metric_name", {"1234": "1234"})).inc()

        assert self.collector_registry.get_sample_value(
            "metric_name", {INVALID_METRIC_NAME: "1234"}) == 1.0
        assert self.get_output()

    def test_case_collision_renders_one_family(self):
        self.metric_registry.counter(MetricName.of("foo", {"a": "1"})).inc()
        self.metric_registry.counter(MetricName.of("FOO", {"a": "2"})).inc()

        output = self.get_output()

        assert output.count("# TYPE foo gauge") == 1
        assert 'foo{a="1"} 1.0' in output
        assert 'foo{a="2"} 1.0' in output

    def test_collect_survives_export_failure(self):
        collector = TritiumCollector(self.metric_registry)

        with patch.object(collector.translator, "export", side_effect=RuntimeError("boom")):
            with patch("metrics.exporters.prometheus.logger"):
                assert list(collector.collect()) == []


class TestToPrometheusMetric:
    """Test conversion of a single family"""

    def test_counter_name_without_total(self):
        family = SampleFamily(
            "jobs_total", FamilyKind.COUNTER, "help",
            (ExportedSample("jobs_total", ("k",), ("v",), 3.0),),
        )

        metric = to_prometheus_metric(family)

        assert metric.name == "jobs"
        assert metric.type == "counter"
        assert metric.samples[0].name == "jobs_total"
        assert metric.samples[0].labels == {"k": "v"}
        assert metric.samples[0].value == 3.0

    def test_summary(self):
        family = SampleFamily(
            "latency", FamilyKind.SUMMARY, "help",
            (ExportedSample("latency", ("quantile",), ("0.5",), 0.2),
             ExportedSample("latency_count", (), (), 4.0)),
        )

        metric = to_prometheus_metric(family)

        assert metric.name == "latency"
        assert metric.type == "summary"
        assert metric.documentation == "help"
        assert [s.name for s in metric.samples] == ["latency", "latency_count"]
