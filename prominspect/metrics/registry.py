from collections import OrderedDict
from typing import Iterable, Iterator, List, Tuple

from .base import MetricDefinition, MetricType


class MetricRegistry:
    """Registry that keeps metric groups in configuration order."""

    def __init__(self, project_name: str = "") -> None:
        self.project_name = project_name
        self._types: "OrderedDict[str, MetricType]" = OrderedDict()

    def register(self, metric_type: MetricType) -> None:
        if metric_type.type in self._types:
            raise ValueError(f"Metric type '{metric_type.type}' is already registered.")
        self._types[metric_type.type] = metric_type

    def all(self) -> Iterable[MetricType]:
        return self._types.values()

    def get(self, type_name: str) -> MetricType:
        if type_name not in self._types:
            raise KeyError(f"Metric type '{type_name}' is not registered.")
        return self._types[type_name]

    def definitions(self) -> Iterator[Tuple[str, MetricDefinition]]:
        for metric_type in self._types.values():
            for metric in metric_type.metrics:
                yield metric_type.type, metric

    def metric_count(self) -> int:
        return sum(len(metric_type.metrics) for metric_type in self._types.values())

    def type_names(self) -> List[str]:
        return list(self._types)

    def __len__(self) -> int:
        return len(self._types)
