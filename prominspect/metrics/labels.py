from __future__ import annotations

from typing import List, Mapping

from loguru import logger

from ..errors import LabelValidationError
from ..models import LabelRecord
from .base import MetricDefinition

PLACEHOLDER = "-"


class LabelReconciler:
    """Resolves a metric's configured label aliases against a sample's labels."""

    def resolve(
        self, metric: MetricDefinition, sample_labels: Mapping[str, str]
    ) -> List[LabelRecord]:
        """Build label records in configured order, filling gaps with the placeholder."""
        labels: List[LabelRecord] = []
        for raw_name, alias in metric.labels.items():
            value = sample_labels.get(raw_name) or ""
            if not value:
                logger.warning(
                    "metric [{}] label [{}] is missing or empty", metric.name, raw_name
                )
                value = PLACEHOLDER
            labels.append(LabelRecord(name=raw_name, alias=alias, value=value))
        return labels

    def validate(self, metric: MetricDefinition, labels: List[LabelRecord]) -> None:
        if len(labels) != len(metric.labels):
            raise LabelValidationError(
                metric.name,
                f"label count mismatch: expected {len(metric.labels)}, got {len(labels)}",
            )
        for label in labels:
            if label.name not in metric.labels:
                raise LabelValidationError(
                    metric.name, f"unconfigured label '{label.name}'", [label.name]
                )
        defective = [label.name for label in labels if label.value in ("", PLACEHOLDER)]
        if defective:
            raise LabelValidationError(
                metric.name, f"empty label values: {', '.join(defective)}", defective
            )

    def reconcile(
        self, metric: MetricDefinition, sample_labels: Mapping[str, str]
    ) -> List[LabelRecord]:
        """Resolve and validate; raises :class:`LabelValidationError` on a defective sample."""
        labels = self.resolve(metric, sample_labels)
        self.validate(metric, labels)
        return labels
