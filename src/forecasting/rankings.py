"""
Best-seller and slow-mover rankings.

Both views aggregate outgoing transactions over the full history (no window)
and join the totals against the current catalog.

Arguments come in the order (transactions, items, predictions=None). The
rankings are computed from transactions alone, so predictions are optional
and only annotate each ranked item with its restock urgency.
"""

from typing import Any, Iterable

import pandas as pd

from .models import InventoryItem, PredictionResult, RankedItem, coerce_items
from .parsers import normalize_transactions

DEFAULT_LIMIT = 5


def compute_sales_totals(transactions: Iterable[Any]) -> pd.DataFrame:
    """
    Total units sold and revenue per item.

    Returns DataFrame with item_id, total_sold, total_revenue in order of
    each item's first sale.
    """
    normalized = normalize_transactions(transactions)
    sales = pd.DataFrame(
        [t.model_dump() for t in normalized if t.is_outgoing],
        columns=["item_id", "quantity", "unit_price"],
    ).astype({"item_id": str, "quantity": float, "unit_price": float})
    sales["revenue"] = sales["quantity"] * sales["unit_price"]

    return (
        sales.groupby("item_id", sort=False)
        .agg(total_sold=("quantity", "sum"), total_revenue=("revenue", "sum"))
        .reset_index()
    )


def _catalog_frame(items: Iterable[InventoryItem | dict]) -> pd.DataFrame:
    return pd.DataFrame(
        [item.model_dump() for item in coerce_items(items)],
        columns=["id", "name", "sku", "stock"],
    ).astype({"id": str, "stock": int})


def _to_ranked_items(
    ranked: pd.DataFrame, predictions: Iterable[PredictionResult] | None
) -> list[RankedItem]:
    urgency = {p.item_id: p.restock_urgency for p in predictions or []}
    return [
        RankedItem(
            id=str(row["id"]),
            name=str(row["name"]),
            sku=str(row["sku"]),
            total_sold=float(row["total_sold"]),
            total_revenue=float(row["total_revenue"]),
            current_stock=int(row["stock"]),
            velocity=float(row["velocity"]),
            restock_urgency=urgency.get(str(row["id"])),
        )
        for row in ranked.to_dict("records")
    ]


def _velocity(df: pd.DataFrame) -> pd.Series:
    return (df["total_sold"] / df["stock"]).where(df["stock"] > 0, 0.0)


def get_best_sellers(
    transactions: Iterable[Any],
    items: Iterable[InventoryItem | dict],
    predictions: Iterable[PredictionResult] | None = None,
    limit: int = DEFAULT_LIMIT,
) -> list[RankedItem]:
    """
    Items with the most units sold, highest first.

    Items missing from the catalog are left out. When predictions are given,
    each ranked item carries its restock urgency.
    """
    totals = compute_sales_totals(transactions)
    catalog = _catalog_frame(items)

    merged = totals.merge(catalog, left_on="item_id", right_on="id", how="inner")
    if merged.empty:
        return []

    merged["velocity"] = _velocity(merged)
    best = merged.sort_values("total_sold", ascending=False, kind="stable").head(limit)

    return _to_ranked_items(best, predictions)


def get_slow_movers(
    transactions: Iterable[Any],
    items: Iterable[InventoryItem | dict],
    predictions: Iterable[PredictionResult] | None = None,
    limit: int = DEFAULT_LIMIT,
) -> list[RankedItem]:
    """
    In-stock items with the lowest sales velocity (sold / stock).

    Equally slow items are ordered by stock, largest first, so the biggest
    over-stock surfaces first.
    """
    totals = compute_sales_totals(transactions)
    catalog = _catalog_frame(items)

    in_stock = catalog[catalog["stock"] > 0]
    merged = in_stock.merge(totals, left_on="id", right_on="item_id", how="left")
    if merged.empty:
        return []

    merged[["total_sold", "total_revenue"]] = merged[["total_sold", "total_revenue"]].fillna(0.0)
    merged["velocity"] = _velocity(merged)
    slow = merged.sort_values(
        ["velocity", "stock"], ascending=[True, False], kind="stable"
    ).head(limit)

    return _to_ranked_items(slow, predictions)
