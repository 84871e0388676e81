"""
Data sufficiency gate.

Predictions are only produced once the transaction history spans at least
MIN_DATA_AGE_DAYS. The gate is binary: below the threshold no item is
predicted, however many transactions exist.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from .models import InventoryTransaction
from .parsers import DateParser, as_utc

logger = logging.getLogger(__name__)

MIN_DATA_AGE_DAYS = 30
MS_PER_DAY = 24 * 60 * 60 * 1000


@dataclass
class DataSufficiency:
    """Whether the history is deep enough to run predictions."""

    has_sufficient_data: bool
    data_age: int
    days_until_ready: int
    message: str
    valid_transactions: int = 0

    @property
    def days_with_data(self) -> int:
        return self.data_age

    def summary(self) -> dict:
        return {
            "has_sufficient_data": self.has_sufficient_data,
            "data_age": self.data_age,
            "days_until_ready": self.days_until_ready,
            "valid_transactions": self.valid_transactions,
            "message": self.message,
        }


def _raw_date(transaction: Any) -> Any:
    if isinstance(transaction, Mapping):
        return transaction.get("date", transaction.get("created_at"))
    return getattr(transaction, "date", None)


def check_data_sufficiency(
    transactions: Sequence[InventoryTransaction],
    now: datetime | None = None,
) -> DataSufficiency:
    """
    Decide whether enough history exists to run predictions.

    Args:
        transactions: Normalized transactions (raw mappings with a "date" are tolerated)
        now: Reference instant. Defaults to the current UTC time.

    Returns:
        DataSufficiency describing the data age and how many days remain.
    """
    if not transactions:
        return DataSufficiency(
            has_sufficient_data=False,
            data_age=0,
            days_until_ready=MIN_DATA_AGE_DAYS,
            message=(
                "No transaction data available yet. "
                "Start using the system to collect data for predictions."
            ),
        )

    # Timestamps are re-validated even after normalization
    parser = DateParser()
    valid_dates = []
    for transaction in transactions:
        parsed = parser.parse(_raw_date(transaction))
        if parsed is None:
            logger.warning(
                "Invalid transaction date %r for transaction %s",
                _raw_date(transaction),
                getattr(transaction, "id", None),
            )
            continue
        valid_dates.append(parsed)

    if not valid_dates:
        return DataSufficiency(
            has_sufficient_data=False,
            data_age=0,
            days_until_ready=MIN_DATA_AGE_DAYS,
            message=(
                "No valid transaction data available yet. "
                "Start using the system to collect data for predictions."
            ),
        )

    oldest = min(valid_dates)
    # Plain millisecond arithmetic, not calendar days
    elapsed_ms = (as_utc(now) - oldest) // timedelta(milliseconds=1)
    data_age = elapsed_ms // MS_PER_DAY

    days_until_ready = max(0, MIN_DATA_AGE_DAYS - data_age)
    has_sufficient_data = data_age >= MIN_DATA_AGE_DAYS
    count = len(valid_dates)

    if has_sufficient_data:
        message = f"{data_age} days of data with {count} transactions - predictions are available"
    else:
        message = (
            f"Collecting data for {data_age} days ({count} transactions). "
            f"{days_until_ready} more days needed for predictions."
        )

    return DataSufficiency(
        has_sufficient_data=has_sufficient_data,
        data_age=data_age,
        days_until_ready=days_until_ready,
        message=message,
        valid_transactions=count,
    )
