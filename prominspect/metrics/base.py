from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Mapping, Sequence, Tuple, Union


class ComparisonMode(str, Enum):
    """How a measured value is compared against its threshold."""

    GREATER = "greater"
    GREATER_EQUAL = "greater_equal"
    LESS = "less"
    LESS_EQUAL = "less_equal"
    EQUAL = "equal"
    NOT_EQUAL = "not_equal"

    @classmethod
    def parse(cls, raw: "str | ComparisonMode | None") -> "ComparisonMode":
        """Resolve a configured mode, falling back to ``greater``."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.GREATER


@dataclass(frozen=True)
class MetricDefinition:
    """Declarative definition of a monitored query."""

    name: str
    query: str
    threshold: float
    description: str = ""
    unit: str = ""
    threshold_type: str = ComparisonMode.GREATER.value
    labels: Mapping[str, str] = field(default_factory=dict)  # raw label -> alias

    @property
    def mode(self) -> ComparisonMode:
        return ComparisonMode.parse(self.threshold_type)


@dataclass(frozen=True)
class MetricType:
    """A named group of metric definitions rendered as one report section."""

    type: str
    metrics: Tuple[MetricDefinition, ...] = ()


@dataclass(frozen=True)
class Sample:
    labels: Mapping[str, str]
    value: float


@dataclass(frozen=True)
class Series:
    labels: Mapping[str, str]
    values: Sequence[Tuple[datetime, float]]


@dataclass(frozen=True)
class VectorResult:
    samples: List[Sample] = field(default_factory=list)


@dataclass(frozen=True)
class ScalarResult:
    value: float
    timestamp: datetime


@dataclass(frozen=True)
class MatrixResult:
    series: List[Series] = field(default_factory=list)


# Any other object returned by a provider is an unsupported shape and is skipped.
QueryResult = Union[VectorResult, ScalarResult, MatrixResult]


class QueryProvider(ABC):
    """Read access to the time-series backend.

    Implementations raise :class:`prominspect.errors.QueryError` on failure.
    Timeouts and cancellation are the provider's concern.
    """

    @abstractmethod
    def instant_query(self, expression: str, timestamp: datetime) -> QueryResult:
        """Evaluate ``expression`` at a single point in time."""

    @abstractmethod
    def range_query(
        self,
        expression: str,
        start: datetime,
        end: datetime,
        step: timedelta,
    ) -> QueryResult:
        """Evaluate ``expression`` over ``[start, end]`` at ``step`` resolution."""
