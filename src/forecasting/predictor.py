"""
Restock prediction pipeline.

normalize -> sufficiency gate -> per item {weekly patterns -> projected rate
-> confidence -> restock estimate} -> action queue sorted by urgency.
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable

from .models import InventoryItem, InventoryTransaction, PredictionResult, coerce_items
from .parsers import as_utc, normalize_transactions
from .patterns import analyze_weekly_usage
from .scoring import apply_usage_trend_factor, calculate_prediction_confidence
from .sufficiency import check_data_sufficiency

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 90
DEFAULT_MIN_TRANSACTIONS = 2
REORDER_WEEKS = 4
CRITICAL_WEEKS = 1
WARNING_WEEKS = 2

# Days until restock when nothing is being used. Also the furthest a
# restock date is projected, so huge stock on slow sales stays in range.
UNBOUNDED_DAYS = 999_999

URGENCY_ORDER = {"critical": 0, "warning": 1, "normal": 2}


@dataclass
class RestockEstimate:
    """When an item runs out and how much to reorder."""

    weeks_until_restock: float
    days_until_restock: int
    predicted_restock_date: datetime
    restock_urgency: str
    suggested_order_quantity: int


def classify_urgency(weeks_until_restock: float) -> str:
    if weeks_until_restock <= CRITICAL_WEEKS:
        return "critical"
    elif weeks_until_restock <= WARNING_WEEKS:
        return "warning"
    return "normal"


def estimate_restock(
    current_stock: int,
    weekly_usage_rate: float,
    now: datetime | None = None,
) -> RestockEstimate:
    """Project the restock date and order size from stock and weekly usage."""
    now = as_utc(now)

    if weekly_usage_rate > 0:
        weeks_until_restock = current_stock / weekly_usage_rate
        days_until_restock = math.floor(weeks_until_restock * 7)
    else:
        weeks_until_restock = math.inf
        days_until_restock = UNBOUNDED_DAYS

    return RestockEstimate(
        weeks_until_restock=weeks_until_restock,
        days_until_restock=days_until_restock,
        predicted_restock_date=now + timedelta(days=min(days_until_restock, UNBOUNDED_DAYS)),
        restock_urgency=classify_urgency(weeks_until_restock),
        suggested_order_quantity=math.ceil(max(weekly_usage_rate, 0.0) * REORDER_WEEKS),
    )


def sort_by_urgency(predictions: Iterable[PredictionResult]) -> list[PredictionResult]:
    """Critical before warning before normal, soonest restock first within a tier."""
    return sorted(
        predictions,
        key=lambda p: (URGENCY_ORDER[p.restock_urgency], p.days_until_restock),
    )


def _outgoing_by_item(
    transactions: Iterable[InventoryTransaction],
) -> dict[str, list[InventoryTransaction]]:
    grouped: dict[str, list[InventoryTransaction]] = defaultdict(list)
    for transaction in transactions:
        if transaction.is_outgoing:
            grouped[transaction.item_id].append(transaction)
    return grouped


def generate_inventory_predictions(
    items: Iterable[InventoryItem | dict],
    transactions: Iterable[Any],
    window_days: int = DEFAULT_WINDOW_DAYS,
    min_transactions_required: int = DEFAULT_MIN_TRANSACTIONS,
    now: datetime | None = None,
) -> list[PredictionResult]:
    """
    Generate restock predictions for every item with enough usage history.

    Args:
        items: Catalog snapshot (InventoryItem or mappings with id/name/sku/stock)
        transactions: Raw or normalized transaction records
        window_days: Days of history analysed per item
        min_transactions_required: Minimum outgoing transactions in the window
        now: Reference instant. Defaults to the current UTC time.

    Returns:
        Predictions sorted as an action queue. Empty when the history is
        too short.
    """
    if window_days <= 0:
        raise ValueError(f"window_days must be positive, got {window_days}")

    now = as_utc(now)
    normalized = normalize_transactions(transactions)

    sufficiency = check_data_sufficiency(normalized, now=now)
    if not sufficiency.has_sufficient_data:
        logger.info("Skipping predictions: %s", sufficiency.message)
        return []

    start = now - timedelta(days=window_days)
    relevant = [t for t in normalized if start < t.date < now]
    item_transactions = _outgoing_by_item(relevant)
    weeks_in_window = window_days / 7

    predictions = []
    for item in coerce_items(items):
        outgoing = item_transactions.get(item.id, [])
        if len(outgoing) < min_transactions_required:
            logger.debug(
                "Skipping %s: %d outgoing transactions (need %d)",
                item.id, len(outgoing), min_transactions_required,
            )
            continue

        pattern = analyze_weekly_usage(outgoing, window_days, now=now)
        total_units_sold = sum(t.quantity for t in outgoing)
        weekly_usage_rate = apply_usage_trend_factor(total_units_sold / weeks_in_window, pattern)

        if weekly_usage_rate <= 0:
            logger.debug("Skipping %s: no usage", item.id)
            continue

        restock = estimate_restock(item.stock, weekly_usage_rate, now=now)
        confidence = calculate_prediction_confidence(
            len(outgoing), pattern.coefficient_of_variation
        )

        predictions.append(
            PredictionResult(
                item_id=item.id,
                name=item.name,
                sku=item.sku,
                current_stock=item.stock,
                daily_usage_rate=weekly_usage_rate / 7,
                weekly_usage_rate=weekly_usage_rate,
                days_until_restock=restock.days_until_restock,
                predicted_restock_date=restock.predicted_restock_date,
                restock_urgency=restock.restock_urgency,
                confidence=round(confidence * 100),
                suggested_order_quantity=restock.suggested_order_quantity,
            )
        )

    logger.info("Generated %d predictions for %d transactions", len(predictions), len(normalized))
    return sort_by_urgency(predictions)
