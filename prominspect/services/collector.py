from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from ..errors import QueryError
from ..metrics.base import QueryProvider
from ..metrics.processor import SampleProcessor
from ..metrics.registry import MetricRegistry
from ..models import MetricGroup, ReportModel
from .aggregator import GroupAggregator
from .charts import ChartSeriesBuilder


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReportCollector:
    """Runs one sequential sweep over every configured metric."""

    def __init__(
        self,
        registry: MetricRegistry,
        provider: QueryProvider,
        processor: Optional[SampleProcessor] = None,
        aggregator: Optional[GroupAggregator] = None,
        charts: Optional[ChartSeriesBuilder] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.registry = registry
        self.provider = provider
        self.processor = processor or SampleProcessor()
        self.aggregator = aggregator or GroupAggregator()
        self.charts = charts or ChartSeriesBuilder()
        self.clock = clock

    def collect(self) -> ReportModel:
        timestamp = self.clock()
        report = ReportModel(timestamp=timestamp, project=self.registry.project_name)

        for metric_type in self.registry.all():
            group = MetricGroup(type=metric_type.type)
            report.groups[metric_type.type] = group

            for metric in metric_type.metrics:
                try:
                    result = self.provider.instant_query(metric.query, timestamp)
                except QueryError as exc:
                    logger.warning("query for metric {} failed: {}", metric.name, exc)
                    continue
                group.metrics_by_name[metric.name] = self.processor.process(
                    metric, result, timestamp
                )

            self.aggregator.apply(group)
            logger.debug(
                "group [{}]: {} records, {} alerts",
                group.type,
                group.stats.total_count,
                group.stats.alert_count,
            )

        chart = self.charts.build(report.groups.values())
        report.categories = chart.labels
        report.chart_series = chart.series
        logger.info(
            "collected {} groups, {} chart categories", len(report.groups), len(chart.labels)
        )
        return report
