import json
from datetime import datetime, timezone

import pytest

from stores.warehouse_export import WarehouseExportLoader

PRODUCTS_CSV = """id,name,sku,quantity
007,Blue Widget,BW-01,12
p-2,Cable Tie,0042,
p-3,Drill Bit,DB-1,40
"""

TRANSACTIONS = [
    {
        "id": "t1",
        "product_id": "007",
        "quantity": -3,
        "transaction_type": "outgoing",
        "created_at": "2025-07-14 22:18:21.435544+00",
        "unit_price": 4.5,
        "reference": "SO-1",
    },
    {
        "id": "t2",
        "product_id": "p-2",
        "quantity": 100,
        "transaction_type": "incoming",
        "created_at": "2025-07-01 08:00:00+00",
    },
    {
        "id": "t3",
        "product_id": "p-3",
        "quantity": 0,
        "transaction_type": "transfer",
        "created_at": "garbage",
    },
]


@pytest.fixture
def export_dir(tmp_path):
    (tmp_path / "products.csv").write_text(PRODUCTS_CSV)
    return tmp_path


def test_items_keep_text_ids_and_default_missing_stock(export_dir):
    (export_dir / "inventory_transactions.json").write_text(json.dumps(TRANSACTIONS))

    items = WarehouseExportLoader(export_dir).load_items()

    assert [i.id for i in items] == ["007", "p-2", "p-3"]
    assert [i.stock for i in items] == [12, 0, 40]
    assert items[1].sku == "0042"


def test_load_all_normalizes_and_checks_quality(export_dir):
    (export_dir / "inventory_transactions.json").write_text(json.dumps(TRANSACTIONS))

    data = WarehouseExportLoader(export_dir).load_all()

    assert len(data.raw_transactions) == 3
    assert [t.id for t in data.transactions] == ["t1", "t2"]
    first = data.transactions[0]
    assert first.item_id == "007"
    assert first.direction == "outgoing"
    assert first.quantity == 3
    assert first.date == datetime(2025, 7, 14, 22, 18, 21, 435544, tzinfo=timezone.utc)

    report = data.quality_reports["transactions"]
    found = {(i.column, i.issue_type) for i in report.issues}
    assert ("created_at", "unparseable_date") in found
    assert ("transaction_type", "invalid_value") in found
    assert ("quantity", "invalid_value") in found
    assert not report.has_critical_issues


def test_wrapped_json_export(export_dir):
    (export_dir / "inventory_transactions.json").write_text(json.dumps({"transactions": TRANSACTIONS[:2]}))

    data = WarehouseExportLoader(export_dir).load_all()

    assert len(data.transactions) == 2


def test_csv_export(export_dir):
    (export_dir / "inventory_transactions.csv").write_text(
        "id,product_id,quantity,transaction_type,created_at,unit_price\n"
        "t1,007,-2,outgoing,2025-07-14 10:00:00+00,1.25\n"
        "t2,007,5,incoming,2025-07-15 10:00:00+00,\n"
    )

    data = WarehouseExportLoader(export_dir).load_all()

    assert [t.direction for t in data.transactions] == ["outgoing", "incoming"]
    assert data.transactions[0].unit_price == 1.25
    assert data.transactions[1].unit_price == 0.0
    assert data.transactions[0].item_id == "007"


def test_missing_exports_raise(tmp_path):
    with pytest.raises(FileNotFoundError):
        WarehouseExportLoader(tmp_path).load_all()
