"""Rolling per-day health matrix.

Every metric is evaluated once per day over a trailing window: the
maximum value seen between local midnight and 23:59:59 (hourly
resolution) is classified with the ``daily`` warning-band policy. A day
whose query fails, or whose label cannot be parsed, is ``abnormal``.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Callable, Iterable, List, Optional, Tuple

from loguru import logger

from ..errors import DateParseError, QueryError
from ..metrics.base import MatrixResult, MetricDefinition, QueryProvider
from ..metrics.classifier import DAILY, BandPolicy, Status, classify
from ..metrics.registry import MetricRegistry
from ..models import DayStatus, MetricStatusRecord, StatusModel, StatusSummary

DATE_FORMAT = "%m-%d"
DEFAULT_DAYS = 7
STEP = timedelta(hours=1)

_DAY_STATUS = {
    Status.NORMAL: DayStatus.NORMAL,
    Status.WARNING: DayStatus.WARNING,
    Status.CRITICAL: DayStatus.ABNORMAL,
}


def _local_now() -> datetime:
    return datetime.now().astimezone()


def date_labels(days: int, today: date) -> List[str]:
    """``MM-DD`` labels for the trailing ``days`` days, oldest first."""
    return [
        (today - timedelta(days=offset)).strftime(DATE_FORMAT)
        for offset in range(days - 1, -1, -1)
    ]


def parse_date_label(label: str, today: date) -> date:
    """Resolve an ``MM-DD`` label to the most recent such date not after ``today``."""
    try:
        parsed = datetime.strptime(f"{today.year}-{label}", f"%Y-{DATE_FORMAT}").date()
    except ValueError as exc:
        raise DateParseError(label) from exc
    if parsed > today:
        try:
            parsed = parsed.replace(year=today.year - 1)
        except ValueError as exc:  # 02-29 in a non-leap year
            raise DateParseError(label) from exc
    return parsed


def day_bounds(day: date, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    """Local midnight to 23:59:59 of ``day``.

    Each bound gets the offset in effect on that day, so days on either
    side of a DST change are covered exactly. Without ``tz`` the system
    local zone is used.
    """
    start = datetime.combine(day, time.min)
    end = datetime.combine(day, time(23, 59, 59))
    if tz is None:
        return start.astimezone(), end.astimezone()
    return start.replace(tzinfo=tz), end.replace(tzinfo=tz)


def window_max(result: object) -> float:
    values: List[float] = []
    if isinstance(result, MatrixResult):
        for series in result.series:
            values.extend(
                float(value) for _, value in series.values if not math.isnan(float(value))
            )
    return max(values) if values else 0.0


class DailyStatusMatrix:
    def __init__(
        self,
        provider: QueryProvider,
        policy: BandPolicy = DAILY,
        clock: Callable[[], datetime] = _local_now,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.provider = provider
        self.policy = policy
        self.clock = clock
        self.tz = tz

    def evaluate_day(self, metric: MetricDefinition, label: str, now: datetime) -> DayStatus:
        """Classify one metric on one day. Raises QueryError or DateParseError."""
        day = parse_date_label(label, now.date())
        start, end = day_bounds(day, self.tz)
        result = self.provider.range_query(metric.query, start, end, STEP)
        if not isinstance(result, MatrixResult):
            logger.debug(
                "metric [{}] returned unsupported result type {}",
                metric.name,
                type(result).__name__,
            )
        peak = window_max(result)
        status = _DAY_STATUS[classify(peak, metric.threshold, metric.mode, self.policy)]
        logger.debug(
            "metric [{}] on {}: max {} threshold {} ({}) -> {}",
            metric.name,
            label,
            peak,
            metric.threshold,
            metric.mode.value,
            status.value,
        )
        return status

    def evaluate_metric(
        self,
        metric: MetricDefinition,
        dates: Iterable[str],
        now: datetime,
        summary: Optional[StatusSummary] = None,
    ) -> MetricStatusRecord:
        record = MetricStatusRecord(
            name=metric.name,
            threshold=metric.threshold,
            unit=metric.unit,
            threshold_type=metric.threshold_type,
        )
        for label in dates:
            try:
                status = self.evaluate_day(metric, label, now)
            except (QueryError, DateParseError) as exc:
                logger.warning(
                    "status of metric [{}] on {} unavailable: {}", metric.name, label, exc
                )
                status = DayStatus.ABNORMAL
            record.daily_status[label] = status
            if summary is not None:
                summary.record(status)
        return record

    def collect(self, registry: MetricRegistry, days: int = DEFAULT_DAYS) -> StatusModel:
        if days < 1:
            raise ValueError("days must be at least 1")
        now = self.clock()
        model = StatusModel(dates=date_labels(days, now.date()))
        logger.info("collecting metric status for {}", model.dates)

        for metric_type in registry.all():
            model.summary.type_counts[metric_type.type] = len(metric_type.metrics)
            model.summary.total_metrics += len(metric_type.metrics)
            for metric in metric_type.metrics:
                model.metrics.append(
                    self.evaluate_metric(metric, model.dates, now, model.summary)
                )

        logger.info(
            "status collected: {} metrics, {} normal, {} warning, {} abnormal",
            model.summary.total_metrics,
            model.summary.normal,
            model.summary.warning,
            model.summary.abnormal,
        )
        return model
