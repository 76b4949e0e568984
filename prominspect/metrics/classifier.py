"""Threshold classification.

Two named warning-band policies are in use:

* ``instant``: used for live reports. The warning band starts at
  ``threshold * 0.8`` for the ``greater`` modes and ends at
  ``threshold * 1.2`` for the ``less`` modes. ``not_equal`` is not
  available and falls back to ``greater`` like any unknown mode.
* ``daily``: used for the per-day status matrix. The band starts at
  ``threshold * 0.9`` and ends (exclusive for ``less``) at
  ``threshold / 0.9``. ``not_equal`` is supported.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Union

from loguru import logger

from .base import ComparisonMode


class Status(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


STATUS_TEXT: Dict[Status, str] = {
    Status.CRITICAL: "Critical",
    Status.WARNING: "Warning",
    Status.NORMAL: "Normal",
}


def status_text(status: Union[Status, str]) -> str:
    try:
        return STATUS_TEXT[Status(status)]
    except ValueError:
        return STATUS_TEXT[Status.NORMAL]


class BandPolicy(ABC):
    """Where the intermediate warning band sits around a threshold."""

    name: str
    supports_not_equal: bool = False

    @abstractmethod
    def near_upper(self, value: float, threshold: float) -> bool:
        """Value is approaching the threshold from below (``greater`` modes)."""

    @abstractmethod
    def near_lower(self, value: float, threshold: float, inclusive: bool) -> bool:
        """Value has passed the threshold but is still close (``less`` modes)."""


class InstantBandPolicy(BandPolicy):
    name = "instant"

    def __init__(self, factor: float = 0.8, margin: float = 0.2) -> None:
        self.factor = factor
        self.margin = margin

    def near_upper(self, value: float, threshold: float) -> bool:
        return value >= threshold * self.factor

    def near_lower(self, value: float, threshold: float, inclusive: bool) -> bool:
        return value <= threshold * (1 + self.margin)


class DailyBandPolicy(BandPolicy):
    name = "daily"
    supports_not_equal = True

    def __init__(self, factor: float = 0.9) -> None:
        self.factor = factor

    def near_upper(self, value: float, threshold: float) -> bool:
        return value >= threshold * self.factor

    def near_lower(self, value: float, threshold: float, inclusive: bool) -> bool:
        limit = threshold / self.factor
        return value <= limit if inclusive else value < limit


INSTANT = InstantBandPolicy()
DAILY = DailyBandPolicy()

POLICIES: Dict[str, BandPolicy] = {INSTANT.name: INSTANT, DAILY.name: DAILY}


def get_policy(name: str) -> BandPolicy:
    if name not in POLICIES:
        raise KeyError(f"Unknown warning band policy '{name}'.")
    return POLICIES[name]


def classify(
    value: float,
    threshold: float,
    mode: Union[ComparisonMode, str, None] = None,
    policy: BandPolicy = INSTANT,
) -> Status:
    """Map ``value`` to a status category. Never raises."""
    resolved = ComparisonMode.parse(mode)
    if resolved is ComparisonMode.NOT_EQUAL and not policy.supports_not_equal:
        logger.debug("policy {} has no not_equal mode, using greater", policy.name)
        resolved = ComparisonMode.GREATER

    if resolved is ComparisonMode.GREATER:
        if value > threshold:
            return Status.CRITICAL
        return Status.WARNING if policy.near_upper(value, threshold) else Status.NORMAL

    if resolved is ComparisonMode.GREATER_EQUAL:
        if value >= threshold:
            return Status.CRITICAL
        return Status.WARNING if policy.near_upper(value, threshold) else Status.NORMAL

    if resolved is ComparisonMode.LESS:
        if value < threshold:
            return Status.NORMAL
        if policy.near_lower(value, threshold, inclusive=False):
            return Status.WARNING
        return Status.CRITICAL

    if resolved is ComparisonMode.LESS_EQUAL:
        if value <= threshold:
            return Status.NORMAL
        if policy.near_lower(value, threshold, inclusive=True):
            return Status.WARNING
        return Status.CRITICAL

    if resolved is ComparisonMode.EQUAL:
        return Status.NORMAL if value == threshold else Status.CRITICAL

    return Status.NORMAL if value != threshold else Status.CRITICAL
