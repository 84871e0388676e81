"""
Usage rate projection and confidence scoring.
"""

from .patterns import WeeklyUsagePattern

TREND_WEIGHT = 0.6
SHIFT_WEIGHT = 0.4
MIN_TREND_FACTOR = -0.3
MAX_TREND_FACTOR = 0.5

TRANSACTION_COUNT_SATURATION = 30
MAX_COUNT_FACTOR = 0.6
MAX_CONSISTENCY_FACTOR = 0.4
MAX_CONFIDENCE = 0.95


def combined_trend_factor(trend: float, usage_shift: float) -> float:
    """Blend the regression trend with the recent shift, bounded to [-0.3, 0.5]."""
    combined = trend * TREND_WEIGHT + usage_shift * SHIFT_WEIGHT
    return max(MIN_TREND_FACTOR, min(MAX_TREND_FACTOR, combined))


def apply_usage_trend_factor(base_rate: float, pattern: WeeklyUsagePattern) -> float:
    """Adjust a base weekly usage rate by the item's trend and usage shift."""
    return base_rate * (1 + combined_trend_factor(pattern.trend, pattern.usage_shift))


def calculate_prediction_confidence(transaction_count: int, coefficient_of_variation: float) -> float:
    """
    Confidence in [0, 0.95] from history size and weekly consistency.

    More transactions raise confidence up to 0.6; low variation adds up to 0.4.
    The result never exceeds 0.95.
    """
    count_factor = min(transaction_count / TRANSACTION_COUNT_SATURATION, MAX_COUNT_FACTOR)
    consistency_factor = max(0.0, MAX_CONSISTENCY_FACTOR - coefficient_of_variation * 0.5)
    return min(count_factor + consistency_factor, MAX_CONFIDENCE)
