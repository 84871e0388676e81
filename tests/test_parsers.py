from datetime import date, datetime, timezone

import pandas as pd
import pytest

from conftest import NOW
from forecasting.models import InventoryTransaction
from forecasting.parsers import DateParser, TransactionNormalizer, as_utc, normalize_transactions


class TestDateParser:
    def setup_method(self):
        self.parser = DateParser()

    def test_store_timestamp_with_microseconds_and_short_offset(self):
        parsed = self.parser.parse("2025-07-14 22:18:21.435544+00")
        assert parsed == datetime(2025, 7, 14, 22, 18, 21, 435544, tzinfo=timezone.utc)

    def test_zulu_suffix(self):
        assert self.parser.parse("2024-01-15T10:30:00Z") == datetime(
            2024, 1, 15, 10, 30, tzinfo=timezone.utc
        )

    def test_odd_fraction_length_falls_back_to_stripped_fraction(self):
        parsed = self.parser.parse("2024-01-15T10:30:00.1234Z")
        assert parsed.replace(microsecond=0) == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self):
        assert self.parser.parse("2024-01-15T12:30:00+02:00") == datetime(
            2024, 1, 15, 10, 30, tzinfo=timezone.utc
        )

    def test_naive_values_are_treated_as_utc(self):
        assert self.parser.parse(datetime(2024, 6, 1, 8)) == datetime(2024, 6, 1, 8, tzinfo=timezone.utc)
        assert self.parser.parse("2024-06-01") == datetime(2024, 6, 1, tzinfo=timezone.utc)

    def test_date_and_timestamp_objects(self):
        assert self.parser.parse(date(2024, 6, 1)) == datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert self.parser.parse(pd.Timestamp("2024-06-01 08:00", tz="UTC")) == datetime(
            2024, 6, 1, 8, tzinfo=timezone.utc
        )

    def test_epoch_milliseconds(self):
        assert self.parser.parse(NOW.timestamp() * 1000) == NOW
        assert self.parser.parse(int(NOW.timestamp() * 1000)) == NOW

    def test_explicit_formats(self):
        assert self.parser.parse("07/14/2025") == datetime(2025, 7, 14, tzinfo=timezone.utc)
        assert self.parser.parse("2025/07/14") == datetime(2025, 7, 14, tzinfo=timezone.utc)

    def test_custom_formats_are_tried(self):
        parser = DateParser(custom_formats=["%d.%m.%Y"])
        assert parser.parse("14.07.2025") == datetime(2025, 7, 14, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "value",
        [
            None,
            "",
            "   ",
            "not a date",
            float("nan"),
            pd.NaT,
            True,
            ["2024-01-01"],
            # Offsets that push the instant outside the datetime range in UTC
            "0001-01-01T00:00:00+01:00",
            "9999-12-31T23:00:00-05:00",
        ],
    )
    def test_unparseable_values_return_none(self, value):
        assert self.parser.parse(value) is None

    def test_instants_before_the_epoch_are_rejected(self):
        assert self.parser.parse("1969-12-31") is None
        assert self.parser.parse(0) is None

    def test_parse_series(self):
        parsed = self.parser.parse_series(pd.Series(["2024-06-01", "garbage"]))
        assert parsed.iloc[0] == datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert pd.isna(parsed.iloc[1])


def test_as_utc_defaults_to_current_time():
    before = datetime.now(timezone.utc)
    assert as_utc() >= before
    assert as_utc(datetime(2024, 1, 1)).tzinfo == timezone.utc


class TestTransactionNormalizer:
    def test_store_record_is_mapped_to_canonical_shape(self):
        [transaction] = normalize_transactions(
            [
                {
                    "id": 17,
                    "product_id": "p-1",
                    "quantity": -4,
                    "transaction_type": "outgoing",
                    "created_at": "2024-06-01 10:00:00.123456+00",
                    "unit_price": 2.5,
                    "reference": "SO-100",
                }
            ]
        )
        assert transaction == InventoryTransaction(
            id="17",
            item_id="p-1",
            quantity=4.0,
            direction="outgoing",
            date=datetime(2024, 6, 1, 10, 0, 0, 123456, tzinfo=timezone.utc),
            unit_price=2.5,
            reference="SO-100",
        )

    def test_defaults_for_optional_fields(self):
        [transaction] = normalize_transactions(
            [{"product_id": "p-1", "quantity": 3, "transaction_type": "incoming", "created_at": "2024-06-01"}]
        )
        assert transaction.unit_price == 0.0
        assert transaction.reference == "N/A"
        assert transaction.id is None

    @pytest.mark.parametrize(
        "marker, expected",
        [("outgoing", "outgoing"), (" OUTGOING ", "outgoing"), ("incoming", "incoming"), ("adjustment", "incoming"), (None, "incoming")],
    )
    def test_direction_classification(self, marker, expected):
        [transaction] = normalize_transactions(
            [{"product_id": "p-1", "quantity": 1, "transaction_type": marker, "created_at": "2024-06-01"}]
        )
        assert transaction.direction == expected

    def test_canonical_field_names_are_accepted(self):
        [transaction] = normalize_transactions(
            [{"itemId": "p-1", "quantity": 2, "type": "outgoing", "date": "2024-06-01", "unitPrice": 1.0}]
        )
        assert transaction.item_id == "p-1"
        assert transaction.direction == "outgoing"
        assert transaction.unit_price == 1.0

    def test_later_date_field_used_when_earlier_one_is_unparseable(self):
        [transaction] = normalize_transactions(
            [{"product_id": "p-1", "quantity": 1, "created_at": "garbage", "date": "2024-06-01"}]
        )
        assert transaction.date == datetime(2024, 6, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "record",
        [
            {"quantity": 1, "created_at": "2024-06-01"},
            {"product_id": "  ", "quantity": 1, "created_at": "2024-06-01"},
            {"product_id": "p-1", "quantity": 0, "created_at": "2024-06-01"},
            {"product_id": "p-1", "created_at": "2024-06-01"},
            {"product_id": "p-1", "quantity": "lots", "created_at": "2024-06-01"},
            {"product_id": "p-1", "quantity": float("nan"), "created_at": "2024-06-01"},
            {"product_id": "p-1", "quantity": 1, "created_at": "garbage"},
            {"product_id": "p-1", "quantity": 1, "created_at": "0001-01-01T00:00:00+01:00"},
            {"product_id": "p-1", "quantity": 1},
        ],
    )
    def test_malformed_records_are_dropped(self, record):
        assert normalize_transactions([record]) == []

    def test_non_mapping_entries_are_dropped(self):
        good = {"product_id": "p-1", "quantity": 1, "created_at": "2024-06-01"}
        assert len(normalize_transactions([42, "row", None, good])) == 1

    def test_out_of_range_timestamp_only_drops_its_own_record(self):
        records = [
            {"product_id": "p-1", "quantity": 1, "created_at": "0001-01-01T00:00:00+01:00"},
            {"product_id": "p-1", "quantity": 2, "created_at": "2024-06-01"},
        ]
        [transaction] = normalize_transactions(records)
        assert transaction.quantity == 2

    def test_canonical_transactions_pass_through(self):
        transaction = InventoryTransaction(item_id="p-1", quantity=1, direction="outgoing", date=NOW)
        assert normalize_transactions([transaction]) == [transaction]

    @pytest.mark.parametrize("records", [None, "records", {"product_id": "p-1"}])
    def test_non_collection_argument_raises(self, records):
        with pytest.raises(TypeError):
            TransactionNormalizer().normalize(records)
