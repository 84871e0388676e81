# Inventory demand forecasting engine
# Pure functions over an item catalog snapshot and a transaction history

from .models import InventoryItem, InventoryTransaction, PredictionResult, RankedItem
from .parsers import DateParser, TransactionNormalizer, normalize_transactions
from .sufficiency import DataSufficiency, check_data_sufficiency
from .patterns import WeeklyUsagePattern, analyze_weekly_usage, compute_trend_slope
from .scoring import (
    apply_usage_trend_factor,
    calculate_prediction_confidence,
    combined_trend_factor,
)
from .predictor import RestockEstimate, estimate_restock, generate_inventory_predictions
from .rankings import get_best_sellers, get_slow_movers
from .views import filter_predictions, predictions_to_frame, sort_predictions, summarize_urgency

__all__ = [
    "InventoryItem",
    "InventoryTransaction",
    "PredictionResult",
    "RankedItem",
    "DateParser",
    "TransactionNormalizer",
    "normalize_transactions",
    "DataSufficiency",
    "check_data_sufficiency",
    "WeeklyUsagePattern",
    "analyze_weekly_usage",
    "compute_trend_slope",
    "apply_usage_trend_factor",
    "calculate_prediction_confidence",
    "combined_trend_factor",
    "RestockEstimate",
    "estimate_restock",
    "generate_inventory_predictions",
    "get_best_sellers",
    "get_slow_movers",
    "filter_predictions",
    "predictions_to_frame",
    "sort_predictions",
    "summarize_urgency",
]
