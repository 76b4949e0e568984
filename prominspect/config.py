from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError
from .metrics.base import ComparisonMode, MetricDefinition, MetricType
from .metrics.registry import MetricRegistry


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PROMINSPECT_")

    app_name: str = "Prometheus Inspection"
    project_name: str = Field("", description="Overrides the project name from the metrics file.")
    metrics_config_path: str = Field(
        "config/config.yaml", description="YAML file with the metric definitions."
    )
    status_days: int = Field(7, ge=1, description="Default trailing window of the status matrix.")
    log_level: str = Field("INFO", description="Minimum level of emitted log records.")


settings = Settings()


class MetricConfig(BaseModel):
    name: str
    description: str = ""
    query: str
    threshold: float
    unit: str = ""
    labels: Dict[str, str] = Field(default_factory=dict)
    threshold_type: Optional[str] = None

    def to_definition(self) -> MetricDefinition:
        return MetricDefinition(
            name=self.name,
            description=self.description,
            query=self.query,
            threshold=self.threshold,
            unit=self.unit,
            labels=dict(self.labels),
            threshold_type=ComparisonMode.parse(self.threshold_type).value,
        )


class MetricTypeConfig(BaseModel):
    type: str
    metrics: List[MetricConfig] = Field(default_factory=list)


class MetricsFile(BaseModel):
    project_name: str = ""
    metric_types: List[MetricTypeConfig] = Field(default_factory=list)


def build_registry(raw: dict, project_name: str = "") -> MetricRegistry:
    try:
        parsed = MetricsFile.model_validate(raw or {})
    except ValidationError as exc:
        raise ConfigError(f"invalid metric definitions: {exc}") from exc

    registry = MetricRegistry(project_name=project_name or parsed.project_name)
    for metric_type in parsed.metric_types:
        try:
            registry.register(
                MetricType(
                    type=metric_type.type,
                    metrics=tuple(metric.to_definition() for metric in metric_type.metrics),
                )
            )
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
    return registry


def load_metric_registry(
    path: Union[str, Path], project_name: str = ""
) -> MetricRegistry:
    """Load metric groups from a YAML file."""
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"cannot parse {path}: {exc}") from exc
    if raw is not None and not isinstance(raw, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return build_registry(raw, project_name=project_name)
