"""
Parsers that turn raw store exports into canonical records.

Store exports are messy:
- Timestamps arrive as datetimes, epoch milliseconds, ISO strings with
  microseconds and short offsets ("2025-07-14 22:18:21.435544+00"), or plain dates
- Field names differ between tables and API versions
- Quantities are signed depending on the movement direction
"""

import logging
import math
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timezone
from typing import Any, Callable

import pandas as pd

from .models import InventoryTransaction

logger = logging.getLogger(__name__)


def as_utc(moment: datetime | None = None) -> datetime:
    """Return ``moment`` as an aware UTC datetime (current time if None)."""
    if moment is None:
        return datetime.now(timezone.utc)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


class DateParser:
    """
    Parses timestamps by trying a list of strategies in order.

    The first strategy that yields an instant wins. Results are normalized to
    aware UTC datetimes and instants at or before the Unix epoch are rejected.
    To extend: pass custom strptime formats, they are tried before the defaults.
    """

    DATE_FORMATS = [
        "%Y-%m-%d %H:%M:%S",  # 2025-07-14 22:18:21
        "%Y-%m-%d",           # 2025-07-14
        "%m/%d/%Y",           # 07/14/2025
        "%d-%m-%Y",           # 14-07-2025
        "%Y/%m/%d",           # 2025/07/14
    ]

    FRACTIONAL_SECONDS = re.compile(r"\.\d+")
    SHORT_OFFSET = re.compile(r"(\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?[+-]\d{2})$")

    def __init__(self, custom_formats: list[str] | None = None):
        self.formats = (custom_formats or []) + self.DATE_FORMATS
        self.strategies: list[Callable[[Any], datetime | None]] = [
            self._from_datetime,
            self._from_epoch_millis,
            self._from_iso,
            self._from_iso_without_fraction,
            self._from_formats,
        ]
        self._cache: dict[str, datetime | None] = {}

    def parse(self, value: Any) -> datetime | None:
        """Parse a single value, returning None when no strategy succeeds."""
        if _is_missing(value):
            return None

        if isinstance(value, str):
            value = value.strip()
            if value in self._cache:
                return self._cache[value]

        result = None
        for strategy in self.strategies:
            parsed = strategy(value)
            if parsed is not None:
                result = self._finalize(parsed)
                break

        if isinstance(value, str):
            self._cache[value] = result
        return result

    def parse_series(self, series: pd.Series) -> pd.Series:
        """Parse an entire pandas Series of timestamps."""
        return series.apply(self.parse)

    @staticmethod
    def _finalize(parsed: datetime) -> datetime | None:
        try:
            moment = as_utc(parsed)
        except OverflowError:
            # Offsets at the edge of the datetime range have no UTC equivalent
            return None
        if moment <= datetime(1970, 1, 1, tzinfo=timezone.utc):
            return None
        return moment

    @staticmethod
    def _from_datetime(value: Any) -> datetime | None:
        if isinstance(value, pd.Timestamp):
            return None if pd.isna(value) else value.to_pydatetime()
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, time.min)
        return None

    @staticmethod
    def _from_epoch_millis(value: Any) -> datetime | None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    def _from_iso(self, value: Any) -> datetime | None:
        if not isinstance(value, str):
            return None
        text = value
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        text = self.SHORT_OFFSET.sub(r"\1:00", text)
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None

    def _from_iso_without_fraction(self, value: Any) -> datetime | None:
        if not isinstance(value, str) or not self.FRACTIONAL_SECONDS.search(value):
            return None
        return self._from_iso(self.FRACTIONAL_SECONDS.sub("", value, count=1))

    def _from_formats(self, value: Any) -> datetime | None:
        if not isinstance(value, str):
            return None
        for fmt in self.formats:
            try:
                return datetime.strptime(value, fmt)
            except ValueError:
                continue
        return None


class TransactionNormalizer:
    """
    Maps raw transaction records onto InventoryTransaction.

    Each canonical field lists the source field names it may come from, in
    priority order. Records that cannot yield an item id, a positive quantity
    and a parseable timestamp are dropped.
    """

    ITEM_ID_FIELDS = ("itemId", "item_id", "product_id")
    QUANTITY_FIELDS = ("quantity", "qty")
    DIRECTION_FIELDS = ("transaction_type", "type")
    DATE_FIELDS = ("created_at", "date", "timestamp")
    PRICE_FIELDS = ("unit_price", "unitPrice")
    REFERENCE_FIELDS = ("reference",)
    ID_FIELDS = ("id",)

    OUTGOING_MARKER = "outgoing"

    def __init__(self, date_parser: DateParser | None = None):
        self.date_parser = date_parser or DateParser()

    def normalize(self, records: Iterable[Any]) -> list[InventoryTransaction]:
        """Normalize a collection of raw records, dropping the malformed ones."""
        if records is None or isinstance(records, (str, bytes, Mapping)):
            raise TypeError(
                f"expected a collection of transaction records, got {type(records).__name__}"
            )

        normalized = []
        dropped = 0
        for record in records:
            transaction = self.normalize_record(record)
            if transaction is None:
                dropped += 1
            else:
                normalized.append(transaction)

        if dropped:
            logger.debug("Dropped %d malformed transaction records", dropped)
        return normalized

    def normalize_record(self, record: Any) -> InventoryTransaction | None:
        """Normalize a single record, or return None if it is unusable."""
        if isinstance(record, InventoryTransaction):
            return record
        if not isinstance(record, Mapping):
            return None

        item_id = self._first_present(record, self.ITEM_ID_FIELDS)
        if item_id is None or not str(item_id).strip():
            return None

        quantity = self._quantity(record)
        if not quantity:
            return None

        moment = self._date(record)
        if moment is None:
            return None

        direction_value = self._first_present(record, self.DIRECTION_FIELDS)
        direction = (
            "outgoing"
            if str(direction_value).strip().lower() == self.OUTGOING_MARKER
            else "incoming"
        )

        record_id = self._first_present(record, self.ID_FIELDS)
        reference = self._first_present(record, self.REFERENCE_FIELDS)

        return InventoryTransaction(
            id=str(record_id) if record_id is not None else None,
            item_id=str(item_id).strip(),
            quantity=quantity,
            direction=direction,
            date=moment,
            unit_price=self._unit_price(record),
            reference=str(reference) if reference is not None else "N/A",
        )

    @staticmethod
    def _first_present(record: Mapping, fields: tuple[str, ...]) -> Any:
        for field in fields:
            value = record.get(field)
            if not _is_missing(value):
                return value
        return None

    def _quantity(self, record: Mapping) -> float | None:
        value = self._first_present(record, self.QUANTITY_FIELDS)
        if value is None or isinstance(value, bool):
            return None
        try:
            quantity = abs(float(value))
        except (TypeError, ValueError):
            return None
        return quantity if math.isfinite(quantity) else None

    def _date(self, record: Mapping) -> datetime | None:
        for field in self.DATE_FIELDS:
            parsed = self.date_parser.parse(record.get(field))
            if parsed is not None:
                return parsed
        return None

    def _unit_price(self, record: Mapping) -> float:
        value = self._first_present(record, self.PRICE_FIELDS)
        if value is None:
            return 0.0
        try:
            price = float(value)
        except (TypeError, ValueError):
            return 0.0
        return price if math.isfinite(price) else 0.0


def normalize_transactions(records: Iterable[Any]) -> list[InventoryTransaction]:
    """Normalize raw transaction records with a fresh normalizer."""
    return TransactionNormalizer().normalize(records)
