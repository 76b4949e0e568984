from pathlib import Path

import pytest

from prominspect.config import Settings, build_registry, load_metric_registry
from prominspect.errors import ConfigError

EXAMPLE_CONFIG = Path(__file__).resolve().parents[1] / "config" / "config.yaml"

METRICS_YAML = """
project_name: staging
metric_types:
  - type: host
    metrics:
      - name: cpu
        description: CPU usage
        query: cpu_usage
        threshold: 80
        unit: "%"
        labels:
          instance: Node
          job: Job
      - name: up
        query: up
        threshold: 1
        threshold_type: equal
  - type: empty
"""


def test_load_metric_registry(tmp_path):
    path = tmp_path / "metrics.yaml"
    path.write_text(METRICS_YAML, encoding="utf-8")
    registry = load_metric_registry(path)

    assert registry.project_name == "staging"
    assert registry.type_names() == ["host", "empty"]
    assert registry.metric_count() == 2
    cpu, up = registry.get("host").metrics
    assert list(cpu.labels.items()) == [("instance", "Node"), ("job", "Job")]
    assert cpu.threshold_type == "greater"
    assert up.threshold_type == "equal"
    assert up.labels == {}
    assert registry.get("empty").metrics == ()


def test_project_name_override(tmp_path):
    path = tmp_path / "metrics.yaml"
    path.write_text(METRICS_YAML, encoding="utf-8")
    assert load_metric_registry(path, project_name="prod").project_name == "prod"


def test_example_config_loads():
    registry = load_metric_registry(EXAMPLE_CONFIG)
    assert len(registry) == 2
    assert all(metric.query for _, metric in registry.definitions())


@pytest.mark.parametrize(
    "content",
    [
        "metric_types: [{type: host, metrics: [{name: cpu}]}]",
        "metric_types: [{type: host}, {type: host}]",
        "- just\n- a list\n",
        "metric_types: [{type: host\n",
    ],
)
def test_invalid_files_raise_config_error(tmp_path, content):
    path = tmp_path / "metrics.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_metric_registry(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_metric_registry(tmp_path / "nope.yaml")


def test_empty_document_yields_empty_registry():
    assert len(build_registry(None)) == 0


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("PROMINSPECT_STATUS_DAYS", "14")
    monkeypatch.setenv("PROMINSPECT_PROJECT_NAME", "edge")
    current = Settings()
    assert current.status_days == 14
    assert current.project_name == "edge"
    assert current.metrics_config_path == "config/config.yaml"
