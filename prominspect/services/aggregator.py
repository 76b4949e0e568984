from __future__ import annotations

import math
from typing import Iterable

from ..metrics.classifier import Status
from ..models import GroupStats, MetricGroup, MetricRecord


class GroupAggregator:
    """Folds metric records into group statistics. Order does not matter."""

    def fold(self, records: Iterable[MetricRecord]) -> GroupStats:
        stats = GroupStats()
        for record in records:
            self.add(stats, record)
        return stats

    @staticmethod
    def add(stats: GroupStats, record: MetricRecord) -> None:
        # NaN samples (e.g. 0/0 expressions) are counted but never become extrema
        if not math.isnan(record.value):
            stats.max_value = max(stats.max_value, record.value)
            stats.min_value = min(stats.min_value, record.value)
        stats.total_count += 1
        if record.status == Status.WARNING.value:
            stats.warning_count += 1
        elif record.status == Status.CRITICAL.value:
            stats.critical_count += 1

    @staticmethod
    def merge(left: GroupStats, right: GroupStats) -> GroupStats:
        """Combine two partial folds, e.g. from separate workers."""
        return GroupStats(
            max_value=max(left.max_value, right.max_value),
            min_value=min(left.min_value, right.min_value),
            total_count=left.total_count + right.total_count,
            warning_count=left.warning_count + right.warning_count,
            critical_count=left.critical_count + right.critical_count,
        )

    def apply(self, group: MetricGroup) -> GroupStats:
        group.stats = self.fold(group.records())
        return group.stats
