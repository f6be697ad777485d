"""Temporal price resolution: which entry is in force on a given day."""

import logging
from datetime import date

from conftest import add_price, add_supplier

from pnl_app.services.price_resolver import find_effective_entries, is_effective, resolve_price


def test_entry_found_inside_open_ended_window(db):
    supplier = add_supplier(db, "W1")
    entry = add_price(db, supplier, effective_from=date(2024, 1, 1))

    assert resolve_price(db, "W1", "P1", date(2024, 1, 1)).id == entry.id
    assert resolve_price(db, "W1", "P1", date(2030, 6, 15)).id == entry.id


def test_both_bounds_are_inclusive(db):
    supplier = add_supplier(db, "W1")
    entry = add_price(db, supplier, effective_from=date(2024, 1, 1), effective_to=date(2024, 1, 31))

    assert resolve_price(db, "W1", "P1", date(2024, 1, 31)).id == entry.id
    assert resolve_price(db, "W1", "P1", date(2023, 12, 31)) is None
    assert resolve_price(db, "W1", "P1", date(2024, 2, 1)) is None


def test_names_are_trimmed_but_case_sensitive(db):
    supplier = add_supplier(db, "W1")
    add_price(db, supplier)

    assert resolve_price(db, "  W1 ", " P1", date(2024, 3, 1)) is not None
    assert resolve_price(db, "w1", "P1", date(2024, 3, 1)) is None


def test_overlapping_entries_resolve_to_lowest_id_and_warn(db, caplog):
    supplier = add_supplier(db, "W1")
    first = add_price(db, supplier, product_name="P1")
    second = add_price(db, supplier, product_name="P1 ", price_after_gst="650")

    with caplog.at_level(logging.WARNING, logger="pnl_app.services.price_resolver"):
        resolved = resolve_price(db, "W1", "P1", date(2024, 3, 1))

    assert resolved.id == first.id
    assert [e.id for e in find_effective_entries(db, "W1", "P1", date(2024, 3, 1))] == [first.id, second.id]
    assert "Ambiguous price" in caplog.text


def test_missing_tables_resolve_to_none(empty_db):
    assert resolve_price(empty_db, "W1", "P1", date(2024, 3, 1)) is None


def test_is_effective_matches_sql_predicate(db):
    supplier = add_supplier(db, "W1")
    entry = add_price(db, supplier, effective_from=date(2024, 1, 1), effective_to=date(2024, 1, 31))

    assert is_effective(entry, date(2024, 1, 1))
    assert is_effective(entry, date(2024, 1, 31))
    assert not is_effective(entry, date(2024, 2, 1))
