"""
Records exchanged with the forecasting engine.

Pydantic models validate what crosses the boundary with the store
(catalog items, transactions) and describe what the engine hands back
(predictions, ranked items).
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

Direction = Literal["incoming", "outgoing"]
Urgency = Literal["critical", "warning", "normal"]


class InventoryItem(BaseModel):
    """A catalog item as observed by the engine."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str = ""
    sku: str = ""
    # The store calls this column "quantity"
    stock: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("stock", "quantity"),
        description="Current on-hand stock",
    )

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if value is None:
            return value
        return str(value)


class InventoryTransaction(BaseModel):
    """A canonical stock movement. Quantity is always a positive magnitude."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    item_id: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    direction: Direction
    date: datetime
    unit_price: float = 0.0
    reference: str = "N/A"

    @field_validator("date")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def is_outgoing(self) -> bool:
        return self.direction == "outgoing"


class PredictionResult(BaseModel):
    """Restock forecast for a single item."""

    item_id: str
    name: str
    sku: str
    current_stock: int
    daily_usage_rate: float = Field(description="Adjusted weekly rate divided by 7")
    weekly_usage_rate: float = Field(description="Trend-adjusted units consumed per week")
    days_until_restock: int
    predicted_restock_date: datetime
    restock_urgency: Urgency
    confidence: int = Field(ge=0, le=100, description="Confidence as a percentage")
    suggested_order_quantity: int = Field(description="Four weeks of projected usage")


class RankedItem(BaseModel):
    """An item in a best-seller or slow-mover list."""

    id: str
    name: str
    sku: str
    total_sold: float
    total_revenue: float
    current_stock: int
    velocity: float = Field(description="Units sold per unit currently in stock")
    restock_urgency: Urgency | None = None


def coerce_items(items: Iterable[InventoryItem | dict]) -> list[InventoryItem]:
    """Validate catalog entries, accepting models or plain mappings."""
    return [
        item if isinstance(item, InventoryItem) else InventoryItem.model_validate(item)
        for item in items
    ]
