"""
Loader for the warehouse app's table exports.

THIS FILE CONTAINS STORE-SPECIFIC LOGIC:
- products table keeps on-hand stock in a "quantity" column
- inventory_transactions rows use product_id, transaction_type and created_at
- created_at values come back as "2025-07-14 22:18:21.435544+00"
- transactions may be exported as JSON (bare list or {"transactions": [...]}) or CSV

To adapt for another store: update the file names and column handling here.
The forecasting package itself stays untouched.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from forecasting.models import InventoryItem, InventoryTransaction, coerce_items
from forecasting.parsers import DateParser, TransactionNormalizer
from forecasting.quality import DataQualityChecker, DataQualityIssue, DataQualityReport

logger = logging.getLogger(__name__)


@dataclass
class LoadedData:
    """Catalog and transaction history loaded from an export directory."""

    items: list[InventoryItem]
    raw_transactions: list[dict[str, Any]]
    transactions: list[InventoryTransaction]
    quality_reports: dict[str, DataQualityReport]


class WarehouseExportLoader:
    """
    Loads and cleans the products and inventory_transactions exports.

    Records the normalizer drops are still counted by the quality report,
    so nothing disappears without a trace.
    """

    PRODUCTS_FILE = "products.csv"
    TRANSACTIONS_JSON = "inventory_transactions.json"
    TRANSACTIONS_CSV = "inventory_transactions.csv"

    TRANSACTION_TYPES = {"incoming", "outgoing"}

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)
        self.date_parser = DateParser()
        self.normalizer = TransactionNormalizer(self.date_parser)

    def load_all(self) -> LoadedData:
        """Load both exports, normalize transactions and run quality checks."""
        items = self.load_items()
        raw = self.load_raw_transactions()
        transactions = self.normalizer.normalize(raw)

        logger.info(
            "Loaded %d items and %d transactions (%d usable) from %s",
            len(items), len(raw), len(transactions), self.data_dir,
        )

        return LoadedData(
            items=items,
            raw_transactions=raw,
            transactions=transactions,
            quality_reports={"transactions": self._check_transaction_quality(raw)},
        )

    def load_items(self) -> list[InventoryItem]:
        """
        Load the products export.

        Missing stock counts as zero; ids and SKUs are kept as text so
        leading zeros survive.
        """
        df = pd.read_csv(
            self.data_dir / self.PRODUCTS_FILE,
            dtype={"id": str, "sku": str, "name": str},
        )
        df.columns = [c.strip().lower() for c in df.columns]

        stock_col = "stock" if "stock" in df.columns else "quantity"
        if stock_col in df.columns:
            df["stock"] = pd.to_numeric(df[stock_col], errors="coerce").fillna(0).astype(int)
        else:
            df["stock"] = 0
        df["name"] = df.get("name", pd.Series("", index=df.index)).fillna("")
        df["sku"] = df.get("sku", pd.Series("", index=df.index)).fillna("")

        return coerce_items(df[["id", "name", "sku", "stock"]].to_dict("records"))

    def load_raw_transactions(self) -> list[dict[str, Any]]:
        """Load the transactions export as raw records, JSON preferred over CSV."""
        json_path = self.data_dir / self.TRANSACTIONS_JSON
        if json_path.exists():
            with open(json_path, encoding="utf-8") as f:
                data = json.load(f)
            return data["transactions"] if isinstance(data, dict) else data

        df = pd.read_csv(self.data_dir / self.TRANSACTIONS_CSV, dtype={"id": str, "product_id": str})
        # NaN cells become None so the normalizer treats them as absent
        return df.astype(object).where(df.notna(), None).to_dict("records")

    def _check_transaction_quality(self, raw: list[dict[str, Any]]) -> DataQualityReport:
        """Run quality checks on the raw transaction export."""
        df = pd.DataFrame(raw)
        date_col = "created_at" if "created_at" in df.columns else "date"

        checker = DataQualityChecker("Inventory Transactions")
        checker.check_required("product_id")
        checker.check_required(date_col)
        checker.check_unparseable_dates(date_col, parser=self.date_parser)
        checker.check_invalid_values(
            "transaction_type", valid_values=self.TRANSACTION_TYPES, severity="warning"
        )
        # Zero quantities are dropped by the normalizer
        checker.check_outliers("quantity", min_val=-10_000, max_val=10_000, severity="warning")
        checker.add_check(self._check_zero_quantities)

        return checker.run(df)

    @staticmethod
    def _check_zero_quantities(df: pd.DataFrame) -> list[DataQualityIssue]:
        if "quantity" not in df.columns:
            return []
        zero = pd.to_numeric(df["quantity"], errors="coerce").fillna(0) == 0
        count = int(zero.sum())
        if count == 0:
            return []
        return [
            DataQualityIssue(
                column="quantity",
                issue_type="invalid_value",
                severity="info",
                count=count,
                percentage=(count / len(df)) * 100,
                description=f"{count:,} records with zero or missing quantity",
            )
        ]
