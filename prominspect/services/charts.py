from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from loguru import logger

from ..models import MetricGroup


def series_key(group_type: str, metric_name: str) -> str:
    return f"{group_type}_{metric_name}"


@dataclass
class ChartData:
    labels: List[str] = field(default_factory=list)
    series: Dict[str, List[float]] = field(default_factory=dict)


class ChartSeriesBuilder:
    """Aligns per-metric values onto one sorted category axis.

    Each record contributes one point, keyed by the value of its first
    label. The axis is the sorted union of every label value seen in the
    report, so series of metrics with different label domains line up and
    unseen positions are zero.
    """

    def build(self, groups: Iterable[MetricGroup]) -> ChartData:
        categories: Set[str] = set()
        points: Dict[Tuple[str, str], Dict[str, float]] = {}

        for group in groups:
            for metric_name, records in group.metrics_by_name.items():
                observed = points.setdefault((group.type, metric_name), {})
                for record in records:
                    for label in record.labels:
                        categories.add(label.value)
                    if record.labels:
                        observed[record.labels[0].value] = record.value

        axis = sorted(categories)
        series: Dict[str, List[float]] = {}
        for (group_type, metric_name), observed in points.items():
            key = self._unique_key(series, group_type, metric_name)
            series[key] = [observed.get(category, 0) for category in axis]
        return ChartData(labels=axis, series=series)

    @staticmethod
    def _unique_key(taken: Dict[str, List[float]], group_type: str, metric_name: str) -> str:
        key = series_key(group_type, metric_name)
        if key not in taken:
            return key
        suffix = 2
        while f"{key}_{suffix}" in taken:
            suffix += 1
        logger.warning(
            "chart key {} of {}/{} is already taken, using {}_{}",
            key,
            group_type,
            metric_name,
            key,
            suffix,
        )
        return f"{key}_{suffix}"
