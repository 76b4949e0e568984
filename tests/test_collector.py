from datetime import datetime, timezone

from prominspect.errors import QueryError
from prominspect.metrics.base import MatrixResult
from prominspect.services.collector import ReportCollector

NOW = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def _collector(registry, provider):
    return ReportCollector(registry=registry, provider=provider, clock=lambda: NOW)


def test_end_to_end_report(provider, metric_factory, vector_factory, registry_factory):
    cpu = metric_factory("cpu", threshold=80)
    provider.instant[cpu.query] = vector_factory(({"host": "a"}, 85), ({"host": "b"}, 50))
    report = _collector(registry_factory({"host": [cpu]}), provider).collect()

    assert report.timestamp == NOW
    assert report.project == "test"
    records = report.groups["host"].metrics_by_name["cpu"]
    assert [(r.labels[0].value, r.status) for r in records] == [("a", "critical"), ("b", "normal")]
    stats = report.groups["host"].stats
    assert (stats.min_value, stats.max_value) == (50, 85)
    assert (stats.total_count, stats.critical_count, stats.warning_count) == (2, 1, 0)
    assert report.categories == ["a", "b"]
    assert report.chart_series == {"host_cpu": [85, 50]}
    assert provider.instant_calls == [(cpu.query, NOW)]


def test_failed_query_skips_only_that_metric(provider, metric_factory, vector_factory, registry_factory):
    good = metric_factory("cpu")
    bad = metric_factory("mem")
    provider.instant[good.query] = vector_factory(({"host": "a"}, 10))
    provider.instant[bad.query] = QueryError(bad.query, "timeout")
    report = _collector(registry_factory({"host": [good, bad]}), provider).collect()

    group = report.groups["host"]
    assert list(group.metrics_by_name) == ["cpu"]
    assert group.stats.total_count == 1


def test_group_without_data(provider, metric_factory, registry_factory):
    metric = metric_factory("cpu")
    provider.instant[metric.query] = MatrixResult()
    report = _collector(registry_factory({"host": [metric], "empty": []}), provider).collect()

    assert report.groups["host"].metrics_by_name["cpu"] == []
    assert report.groups["host"].stats.total_count == 0
    assert report.groups["empty"].stats.to_dict()["min"] is None
    payload = report.to_dict()
    assert payload["chart"] == {"labels": [], "series": {"host_cpu": []}}
    assert set(payload["groups"]) == {"host", "empty"}
