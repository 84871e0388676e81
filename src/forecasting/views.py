"""
Filtering, sorting and summaries over a prediction list, for display.
"""

from typing import Iterable

import pandas as pd

from .models import PredictionResult

# Horizon filters: keep predictions restocking within N days
HORIZON_FILTERS = {"7days": 7, "14days": 14, "30days": 30}
URGENCY_FILTERS = {"critical", "warning"}
TIME_FILTERS = ["all", *sorted(URGENCY_FILTERS), *HORIZON_FILTERS]

SORT_OPTIONS = ["urgency", "name", "stock", "usage", "confidence"]


def _matches_time_filter(prediction: PredictionResult, time_filter: str) -> bool:
    if time_filter == "all":
        return True
    if time_filter in URGENCY_FILTERS:
        return prediction.restock_urgency == time_filter
    return prediction.days_until_restock <= HORIZON_FILTERS[time_filter]


def filter_predictions(
    predictions: Iterable[PredictionResult],
    search_term: str = "",
    time_filter: str = "all",
) -> list[PredictionResult]:
    """Keep predictions matching a name/SKU search and an urgency or horizon filter."""
    if time_filter not in TIME_FILTERS:
        raise ValueError(f"Unknown time filter {time_filter!r}, expected one of {TIME_FILTERS}")

    term = search_term.strip().lower()
    return [
        p
        for p in predictions
        if (term in p.name.lower() or term in p.sku.lower())
        and _matches_time_filter(p, time_filter)
    ]


def sort_predictions(
    predictions: Iterable[PredictionResult], sort_by: str = "urgency"
) -> list[PredictionResult]:
    """
    Reorder predictions for display.

    "urgency" keeps the incoming order, which generate_inventory_predictions
    already returns as an action queue.
    """
    predictions = list(predictions)
    if sort_by == "urgency":
        return predictions
    elif sort_by == "name":
        return sorted(predictions, key=lambda p: p.name.casefold())
    elif sort_by == "stock":
        return sorted(predictions, key=lambda p: p.current_stock)
    elif sort_by == "usage":
        return sorted(predictions, key=lambda p: p.daily_usage_rate, reverse=True)
    elif sort_by == "confidence":
        return sorted(predictions, key=lambda p: p.confidence, reverse=True)
    raise ValueError(f"Unknown sort option {sort_by!r}, expected one of {SORT_OPTIONS}")


def summarize_urgency(predictions: Iterable[PredictionResult]) -> dict[str, int]:
    """Count predictions per urgency tier."""
    counts = {"critical": 0, "warning": 0, "normal": 0}
    for p in predictions:
        counts[p.restock_urgency] += 1
    return counts


def predictions_to_frame(predictions: Iterable[PredictionResult]) -> pd.DataFrame:
    """Flatten predictions into a DataFrame with one row per item."""
    return pd.DataFrame(
        [p.model_dump() for p in predictions],
        columns=list(PredictionResult.model_fields),
    )
