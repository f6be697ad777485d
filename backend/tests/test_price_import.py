"""Bulk price list import, GST derivation and single entry upserts."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import add_order, add_supplier

from pnl_app.models import PriceEntry, Supplier
from pnl_app.schemas.pricing import PriceEntryIn
from pnl_app.services.price_entry_service import (
    build_template_csv,
    create_or_update_entry,
    delete_all_entries,
    derive_prices,
    export_entries_csv,
    import_price_rows,
    list_entries,
    replace_entry,
)


def _row(**overrides):
    row = {
        "Supplier Name": "W1",
        "Product Name": "P1",
        "Price Before GST (INR)": "100",
        "GST Rate (%)": "18",
        "Price After GST (INR)": "",
        "HSN Code": "6109",
        "Currency": "INR",
        "Effective From (YYYY-MM-DD)": "2024-01-01",
        "Effective To (YYYY-MM-DD)": "",
    }
    row.update(overrides)
    return row


class TestDerivePrices:
    def test_adds_gst_to_base_price(self):
        prices = derive_prices(Decimal("100"), Decimal("18"), Decimal("0"))
        assert prices.price_after_gst == Decimal("118.00")

    def test_back_calculates_with_default_rate(self):
        prices = derive_prices(Decimal("0"), Decimal("0"), Decimal("118"))
        assert prices.price_before_gst == Decimal("100.00")
        assert prices.gst_rate == Decimal("18.00")

    def test_keeps_both_sides_when_given(self):
        prices = derive_prices(Decimal("90"), Decimal("5"), Decimal("99"))
        assert (prices.price_before_gst, prices.gst_rate, prices.price_after_gst) == (
            Decimal("90.00"),
            Decimal("5.00"),
            Decimal("99.00"),
        )


def test_import_creates_supplier_and_entry(db):
    result = import_price_rows(db, [_row()])

    assert result["success_count"] == 1
    assert result["error_count"] == 0
    entry = db.query(PriceEntry).one()
    assert entry.price_after_gst == Decimal("118.00")
    assert entry.supplier_product_id == "W1P1"
    assert entry.effective_to is None
    assert db.query(Supplier).one().name == "W1"


def test_reimport_overwrites_instead_of_duplicating(db):
    import_price_rows(db, [_row()])
    import_price_rows(db, [_row()])
    import_price_rows(db, [_row(**{"Price Before GST (INR)": "200"})])

    entries = db.query(PriceEntry).all()
    assert len(entries) == 1
    assert entries[0].price_after_gst == Decimal("236.00")
    assert db.query(Supplier).count() == 1


def test_headers_match_ignoring_case_and_spaces(db):
    row = {
        "supplier name": "W1",
        "PRODUCTNAME": "P1",
        "price after gst": "118",
        "hsn code": "6109",
        "Effective From": "2024-01-01 00:00:00",
    }

    result = import_price_rows(db, [row])

    assert result["success_count"] == 1
    entry = db.query(PriceEntry).one()
    assert entry.price_before_gst == Decimal("100.00")
    assert entry.gst_rate == Decimal("18.00")
    assert entry.effective_from == date(2024, 1, 1)


def test_bad_rows_are_counted_not_fatal(db):
    rows = [
        _row(),
        _row(**{"HSN Code": ""}),
        _row(**{"Product Name": "P2", "Price Before GST (INR)": "abc"}),
    ]

    result = import_price_rows(db, rows)

    assert result["success_count"] == 1
    assert result["error_count"] == 2
    assert result["errors"][0].startswith("Row 3: Missing required fields")
    assert result["errors"][1] == "Row 4: Invalid price (Price After GST must be > 0)"


def test_error_list_is_truncated_but_counts_are_not(db):
    rows = [_row(**{"Supplier Name": ""}) for _ in range(30)]

    result = import_price_rows(db, rows)

    assert result["error_count"] == 30
    assert len(result["errors"]) == 20


def test_unreadable_effective_to_rejects_the_row(db):
    result = import_price_rows(db, [_row(**{"Effective To (YYYY-MM-DD)": "2024-13-45"})])

    assert result["success_count"] == 0
    assert result["error_count"] == 1
    assert result["errors"][0] == "Row 2: Invalid Effective To date '2024-13-45'"
    assert db.query(PriceEntry).count() == 0


def test_effective_to_before_effective_from_rejects_the_row(db):
    result = import_price_rows(db, [_row(**{"Effective To (YYYY-MM-DD)": "2023-12-31"})])

    assert result["success_count"] == 0
    assert result["errors"][0].startswith("Row 2: Effective To 2023-12-31 is before Effective From 2024-01-01")
    assert db.query(PriceEntry).count() == 0


def test_single_entry_upsert_and_replace(db):
    supplier = add_supplier(db, "W1")
    payload = PriceEntryIn(
        supplier_id=supplier.id,
        product_name="P1",
        price_before_gst=Decimal("100"),
        gst_rate=Decimal("18"),
        hsn_code="6109",
        effective_from=date(2024, 1, 1),
    )

    first = create_or_update_entry(db, payload)
    again = create_or_update_entry(db, payload.model_copy(update={"price_before_gst": Decimal("50")}))

    assert first.id == again.id
    assert again.price_after_gst == Decimal("59.00")

    replaced = replace_entry(
        db,
        first.id,
        payload.model_copy(update={"product_name": "P9", "price_before_gst": None, "price_after_gst": Decimal("118")}),
    )
    assert replaced.product_name == "P9"
    assert replaced.price_before_gst == Decimal("100.00")
    assert replaced.supplier_product_id == "W1P9"


def test_single_entry_rejects_unknown_supplier_and_zero_price(db):
    payload = PriceEntryIn(supplier_id=999, product_name="P1", effective_from=date(2024, 1, 1))
    with pytest.raises(ValueError, match="Supplier not found"):
        create_or_update_entry(db, payload)

    supplier = add_supplier(db, "W1")
    with pytest.raises(ValueError, match="greater than 0"):
        create_or_update_entry(db, payload.model_copy(update={"supplier_id": supplier.id}))


def test_single_entry_rejects_blank_product_name(db):
    supplier = add_supplier(db, "W1")
    payload = PriceEntryIn(
        supplier_id=supplier.id,
        product_name="   ",
        price_before_gst=Decimal("100"),
        hsn_code="6109",
        effective_from=date(2024, 1, 1),
    )

    with pytest.raises(ValueError, match="product_name is required"):
        create_or_update_entry(db, payload)
    assert db.query(PriceEntry).count() == 0


def test_replace_requires_hsn_code_and_free_pair(db):
    supplier = add_supplier(db, "W1")
    payload = PriceEntryIn(
        supplier_id=supplier.id,
        product_name="P1",
        price_before_gst=Decimal("100"),
        hsn_code="6109",
        effective_from=date(2024, 1, 1),
    )
    create_or_update_entry(db, payload)
    second = create_or_update_entry(db, payload.model_copy(update={"product_name": "P2"}))

    with pytest.raises(ValueError, match="hsn_code is required"):
        replace_entry(db, second.id, payload.model_copy(update={"product_name": "P2", "hsn_code": "  "}))
    with pytest.raises(ValueError, match="already exists"):
        replace_entry(db, second.id, payload)
    with pytest.raises(ValueError, match="on or after effective_from"):
        replace_entry(
            db,
            second.id,
            payload.model_copy(update={"product_name": "P2", "effective_to": date(2023, 12, 31)}),
        )

    db.refresh(second)
    assert second.product_name == "P2"
    assert second.hsn_code == "6109"


def test_delete_all_removes_entries_and_suppliers(db):
    import_price_rows(db, [_row(), _row(**{"Supplier Name": "W2"})])

    result = delete_all_entries(db)

    assert result == {"deleted_prices": 2, "deleted_suppliers": 2}
    assert list_entries(db) == []


def test_export_includes_order_counts(db):
    import_price_rows(db, [_row()])
    add_order(db, date(2024, 2, 1), product_name="P1", pickup_warehouse="W1")
    add_order(db, date(2024, 2, 2), product_name="P1", pickup_warehouse="W1")

    lines = export_entries_csv(db).strip().splitlines()

    assert lines[0].startswith("Supplier Name,Product Name,Order Count")
    assert lines[1].startswith("W1,P1,2,W1P1,100.00,18.00,118.00,6109,INR,2024-01-01")


def test_template_lists_missing_pairs(db):
    add_order(db, date(2024, 2, 1), product_name="P7", pickup_warehouse="W3")

    lines = build_template_csv(db, today=date(2025, 3, 1)).strip().splitlines()

    assert lines[1] == "W3,P7,1,W3P7,,,,,INR,2025-03-01,2026-03-01"


def test_template_falls_back_to_sample_row(db):
    lines = build_template_csv(db, today=date(2025, 3, 1)).strip().splitlines()

    assert lines[1].startswith("Sample Supplier,Sample Product,5,")
