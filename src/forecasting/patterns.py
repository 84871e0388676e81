"""
Weekly usage pattern analysis.

Buckets an item's outgoing transactions into ISO weeks over the analysis
window and derives:
- trend (regression slope as a fraction of the weekly mean)
- coefficient of variation (volatility)
- usage shift (last 4 weeks vs. the older weeks)
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable

import numpy as np

from .models import InventoryTransaction
from .parsers import as_utc

RECENT_WEEKS = 4
MIN_WEEKS_FOR_TREND = 3


@dataclass
class WeeklyUsagePattern:
    """Usage signals for one item. weekly_data is ordered oldest week first."""

    trend: float = 0.0
    coefficient_of_variation: float = 0.0
    usage_shift: float = 0.0
    weekly_data: list[float] = field(default_factory=list)


def week_key(moment: datetime) -> tuple[int, int]:
    """ISO (year, week) of a UTC instant."""
    iso = as_utc(moment).isocalendar()
    return iso[0], iso[1]


def compute_trend_slope(values: Iterable[float]) -> float:
    """
    Least-squares slope of values indexed 0..n-1, divided by their mean.

    Returns 0 for fewer than two points or a zero mean.
    """
    y = np.asarray(list(values), dtype=float)
    n = len(y)
    if n <= 1:
        return 0.0

    x = np.arange(n, dtype=float)
    sum_x, sum_y = x.sum(), y.sum()
    sum_xy, sum_xx = (x * y).sum(), (x * x).sum()

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
    mean = sum_y / n
    return float(slope / mean) if mean != 0 else 0.0


def analyze_weekly_usage(
    transactions: Iterable[InventoryTransaction],
    window_days: int = 90,
    now: datetime | None = None,
) -> WeeklyUsagePattern:
    """
    Analyze an item's outgoing transactions week by week.

    Args:
        transactions: The item's outgoing transactions inside the window
        window_days: Length of the analysis window
        now: Reference instant. Defaults to the current UTC time.
    """
    now = as_utc(now)

    # Every week in the window starts at zero so gaps count as real zeros
    weekly_usage: dict[tuple[int, int], float] = {
        week_key(now - timedelta(days=7 * i)): 0.0
        for i in range(math.ceil(window_days / 7))
    }
    for transaction in transactions:
        key = week_key(transaction.date)
        weekly_usage[key] = weekly_usage.get(key, 0.0) + transaction.quantity

    if not weekly_usage:
        return WeeklyUsagePattern()

    weekly_data = np.array([weekly_usage[key] for key in sorted(weekly_usage)])

    trend = compute_trend_slope(weekly_data) if len(weekly_data) >= MIN_WEEKS_FOR_TREND else 0.0

    mean = weekly_data.mean()
    coefficient_of_variation = float(weekly_data.std() / mean) if mean > 0 else 0.0

    recent = weekly_data[-RECENT_WEEKS:]
    older = weekly_data[:-RECENT_WEEKS]
    recent_avg = recent.mean() if recent.size else 0.0
    # No older weeks means no shift
    older_avg = older.mean() if older.size else recent_avg
    usage_shift = float((recent_avg - older_avg) / older_avg) if older_avg > 0 else 0.0

    return WeeklyUsagePattern(
        trend=trend,
        coefficient_of_variation=coefficient_of_variation,
        usage_shift=usage_shift,
        weekly_data=weekly_data.tolist(),
    )
