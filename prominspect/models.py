from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


def _json_number(value: float) -> Optional[float]:
    # NaN and infinities are not valid JSON
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class LabelRecord:
    name: str  # raw backend label name
    alias: str
    value: str


@dataclass(frozen=True)
class MetricRecord:
    """One validated, classified sample of a metric."""

    name: str
    description: str
    value: float
    threshold: float
    unit: str
    status: str
    status_text: str
    timestamp: datetime
    labels: List[LabelRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "value": _json_number(self.value),
            "threshold": self.threshold,
            "unit": self.unit,
            "status": self.status,
            "status_text": self.status_text,
            "timestamp": self.timestamp.isoformat(),
            "labels": [
                {"name": label.name, "alias": label.alias, "value": label.value}
                for label in self.labels
            ],
        }


@dataclass
class GroupStats:
    """Summary of a metric group.

    Extrema are only meaningful when ``has_data`` is true: with no records,
    or only NaN values, they keep their sentinel infinities.
    """

    max_value: float = -math.inf
    min_value: float = math.inf
    total_count: int = 0
    warning_count: int = 0
    critical_count: int = 0

    @property
    def alert_count(self) -> int:
        return self.warning_count + self.critical_count

    @property
    def has_data(self) -> bool:
        return self.total_count > 0 and self.min_value <= self.max_value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max": self.max_value if self.has_data else None,
            "min": self.min_value if self.has_data else None,
            "total": self.total_count,
            "warning": self.warning_count,
            "critical": self.critical_count,
            "alert": self.alert_count,
        }


@dataclass
class MetricGroup:
    type: str
    metrics_by_name: Dict[str, List[MetricRecord]] = field(default_factory=dict)
    stats: GroupStats = field(default_factory=GroupStats)

    def records(self) -> List[MetricRecord]:
        return [record for records in self.metrics_by_name.values() for record in records]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "metrics": {
                name: [record.to_dict() for record in records]
                for name, records in self.metrics_by_name.items()
            },
            "stats": self.stats.to_dict(),
        }


@dataclass
class ReportModel:
    timestamp: datetime
    project: str = ""
    groups: Dict[str, MetricGroup] = field(default_factory=dict)
    chart_series: Dict[str, List[float]] = field(default_factory=dict)
    categories: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "project": self.project,
            "groups": {name: group.to_dict() for name, group in self.groups.items()},
            "chart": {
                "labels": list(self.categories),
                "series": {
                    key: [_json_number(value) for value in values]
                    for key, values in self.chart_series.items()
                },
            },
        }


class DayStatus(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    ABNORMAL = "abnormal"


@dataclass
class MetricStatusRecord:
    name: str
    threshold: float
    unit: str
    threshold_type: str
    daily_status: Dict[str, DayStatus] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "threshold": self.threshold,
            "unit": self.unit,
            "threshold_type": self.threshold_type,
            "daily_status": {day: status.value for day, status in self.daily_status.items()},
        }


@dataclass
class StatusSummary:
    normal: int = 0
    warning: int = 0
    abnormal: int = 0
    total_metrics: int = 0
    type_counts: Dict[str, int] = field(default_factory=dict)

    def record(self, status: DayStatus) -> None:
        if status is DayStatus.NORMAL:
            self.normal += 1
        elif status is DayStatus.WARNING:
            self.warning += 1
        else:
            self.abnormal += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "normal": self.normal,
            "warning": self.warning,
            "abnormal": self.abnormal,
            "total_metrics": self.total_metrics,
            "type_counts": dict(self.type_counts),
        }


@dataclass
class StatusModel:
    summary: StatusSummary = field(default_factory=StatusSummary)
    metrics: List[MetricStatusRecord] = field(default_factory=list)
    dates: List[str] = field(default_factory=list)

    def get(self, name: str) -> Optional[MetricStatusRecord]:
        for metric in self.metrics:
            if metric.name == name:
                return metric
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "metrics": [metric.to_dict() for metric in self.metrics],
            "dates": list(self.dates),
        }
