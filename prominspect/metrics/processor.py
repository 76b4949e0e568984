from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from loguru import logger

from ..errors import LabelValidationError
from ..models import MetricRecord
from .base import MetricDefinition, QueryResult, Sample, ScalarResult, VectorResult
from .classifier import INSTANT, BandPolicy, classify, status_text
from .labels import LabelReconciler


class SampleProcessor:
    """Turns one instant query result into validated metric records."""

    def __init__(
        self,
        reconciler: Optional[LabelReconciler] = None,
        policy: BandPolicy = INSTANT,
    ) -> None:
        self.reconciler = reconciler or LabelReconciler()
        self.policy = policy

    def process(
        self,
        metric: MetricDefinition,
        result: QueryResult,
        timestamp: Optional[datetime] = None,
    ) -> List[MetricRecord]:
        timestamp = timestamp or datetime.now(timezone.utc)
        if isinstance(result, VectorResult):
            samples: Iterable[Sample] = result.samples
        elif isinstance(result, ScalarResult):
            samples = [Sample(labels={}, value=result.value)]
        else:
            logger.debug(
                "metric [{}] returned unsupported result type {}",
                metric.name,
                type(result).__name__,
            )
            return []

        records: List[MetricRecord] = []
        for sample in samples:
            record = self.process_sample(metric, sample, timestamp)
            if record is not None:
                records.append(record)
        return records

    def process_sample(
        self, metric: MetricDefinition, sample: Sample, timestamp: datetime
    ) -> Optional[MetricRecord]:
        try:
            labels = self.reconciler.reconcile(metric, sample.labels)
        except LabelValidationError as exc:
            logger.warning("skipping sample of metric [{}]: {}", metric.name, exc.reason)
            return None

        value = float(sample.value)
        status = classify(value, metric.threshold, metric.mode, self.policy)
        return MetricRecord(
            name=metric.name,
            description=metric.description,
            value=value,
            threshold=metric.threshold,
            unit=metric.unit,
            status=status.value,
            status_text=status_text(status),
            timestamp=timestamp,
            labels=labels,
        )
