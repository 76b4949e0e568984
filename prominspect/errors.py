from typing import Sequence


class InspectionError(Exception):
    """Base class for errors raised by the inspection core."""


class QueryError(InspectionError):
    """The query provider failed to evaluate an expression."""

    def __init__(self, expression: str, reason: str) -> None:
        super().__init__(f"query {expression!r} failed: {reason}")
        self.expression = expression
        self.reason = reason


class LabelValidationError(InspectionError):
    """A sample's labels could not be reconciled with the metric's label mapping."""

    def __init__(self, metric: str, reason: str, labels: Sequence[str] = ()) -> None:
        super().__init__(f"metric '{metric}': {reason}")
        self.metric = metric
        self.reason = reason
        self.labels = list(labels)


class DateParseError(InspectionError, ValueError):
    """A day label in the status matrix is not a valid ``MM-DD`` date."""

    def __init__(self, label: str) -> None:
        super().__init__(f"invalid date label {label!r}, expected MM-DD")
        self.label = label


class ConfigError(InspectionError):
    """The metric definition file is missing or malformed."""
