from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

import pytest

from prominspect.errors import QueryError
from prominspect.metrics.base import (
    MetricDefinition,
    MetricType,
    QueryProvider,
    QueryResult,
    Sample,
    VectorResult,
)
from prominspect.metrics.registry import MetricRegistry

RangeAnswer = Union[QueryResult, Callable[[datetime, datetime], QueryResult], Exception]


class FakeQueryProvider(QueryProvider):
    """Serves canned results keyed by expression."""

    def __init__(self) -> None:
        self.instant: Dict[str, Union[QueryResult, Exception]] = {}
        self.ranges: Dict[str, RangeAnswer] = {}
        self.instant_calls: List[Tuple[str, datetime]] = []
        self.range_calls: List[Tuple[str, datetime, datetime, timedelta]] = []

    def instant_query(self, expression, timestamp):
        self.instant_calls.append((expression, timestamp))
        answer = self.instant.get(expression)
        if answer is None:
            raise QueryError(expression, "no data configured")
        if isinstance(answer, Exception):
            raise answer
        return answer

    def range_query(self, expression, start, end, step):
        self.range_calls.append((expression, start, end, step))
        answer = self.ranges.get(expression)
        if answer is None:
            raise QueryError(expression, "no data configured")
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(start, end)
        return answer


def vector(*samples: Tuple[Mapping[str, str], float]) -> VectorResult:
    return VectorResult(samples=[Sample(labels=dict(labels), value=value) for labels, value in samples])


def make_metric(
    name: str = "cpu",
    threshold: float = 80,
    threshold_type: str = "greater",
    labels: Optional[Mapping[str, str]] = None,
    query: Optional[str] = None,
) -> MetricDefinition:
    return MetricDefinition(
        name=name,
        description=f"{name} description",
        query=query or f"{name}_query",
        threshold=threshold,
        unit="%",
        threshold_type=threshold_type,
        labels=dict({"host": "Host"} if labels is None else labels),
    )


@pytest.fixture
def provider() -> FakeQueryProvider:
    return FakeQueryProvider()


@pytest.fixture
def metric_factory():
    return make_metric


@pytest.fixture
def vector_factory():
    return vector


@pytest.fixture
def registry_factory():
    def build(groups: Mapping[str, List[MetricDefinition]], project: str = "test") -> MetricRegistry:
        registry = MetricRegistry(project_name=project)
        for type_name, metrics in groups.items():
            registry.register(MetricType(type=type_name, metrics=tuple(metrics)))
        return registry

    return build


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 10, 15, 30, tzinfo=timezone(timedelta(hours=8)))
