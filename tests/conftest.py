from datetime import datetime, timedelta, timezone

import pytest

from forecasting.models import PredictionResult

# A Wednesday midday, so "now minus whole weeks minus an hour" stays in the same ISO week
NOW = datetime(2024, 6, 12, 12, 0, tzinfo=timezone.utc)


def store_record(
    product_id: str,
    days_ago: float,
    quantity: float,
    transaction_type: str = "outgoing",
    unit_price: float | None = None,
    record_id: str | None = None,
) -> dict:
    """A transaction row shaped like the store's inventory_transactions export."""
    created_at = NOW - timedelta(days=days_ago)
    record = {
        "id": record_id or f"{product_id}-{days_ago}",
        "product_id": product_id,
        # The store signs outgoing movements
        "quantity": -quantity if transaction_type == "outgoing" else quantity,
        "transaction_type": transaction_type,
        "created_at": created_at.strftime("%Y-%m-%d %H:%M:%S.%f+00"),
    }
    if unit_price is not None:
        record["unit_price"] = unit_price
    return record


def weekly_sales(product_id: str, quantities: list[float], unit_price: float | None = None) -> list[dict]:
    """One outgoing record per week, most recent week first, an hour before the week boundary."""
    return [
        store_record(product_id, days_ago=7 * week + 1 / 24, quantity=qty, unit_price=unit_price)
        for week, qty in enumerate(quantities)
    ]


def history_anchor() -> dict:
    """An old receipt that gives the history enough depth to pass the sufficiency gate."""
    return store_record("anchor", days_ago=120, quantity=1, transaction_type="incoming")


def make_prediction(item_id: str, **overrides) -> PredictionResult:
    fields = dict(
        item_id=item_id,
        name=f"Product {item_id}",
        sku=f"SKU-{item_id}",
        current_stock=10,
        daily_usage_rate=1.0,
        weekly_usage_rate=7.0,
        days_until_restock=10,
        predicted_restock_date=NOW + timedelta(days=10),
        restock_urgency="warning",
        confidence=50,
        suggested_order_quantity=28,
    )
    fields.update(overrides)
    return PredictionResult(**fields)


@pytest.fixture
def now() -> datetime:
    return NOW
