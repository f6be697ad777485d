import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd
from dateutil.relativedelta import relativedelta
from sqlalchemy import func, literal, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pnl_app.core.config import settings
from pnl_app.core.database import available_tables
from pnl_app.models.order import Order
from pnl_app.models.price_entry import PriceEntry
from pnl_app.models.supplier import Supplier
from pnl_app.schemas.pricing import PriceEntryIn
from pnl_app.services.missing_price_service import MissingPriceOptions, find_missing
from pnl_app.services.supplier_service import find_or_create_supplier, supplier_join_column
from pnl_app.utils.text_cleaner import pick_value
from pnl_app.utils.value_parser import money, parse_date, parse_decimal

logger = logging.getLogger(__name__)

DUPLICATE_ENTRY_MESSAGE = "A price entry for this supplier and product already exists"


# -------------------------------------------------
# HEADER ALIASES (matched ignoring case and spaces)
# -------------------------------------------------

FIELD_ALIASES: Dict[str, List[str]] = {
    "supplier_name": ["Supplier Name", "supplier_name", "Supplier"],
    "product_name": ["Product Name", "product_name", "Product"],
    "currency": ["Currency", "currency"],
    "price_before_gst": ["Price Before GST (INR)", "Price Before GST", "price_before_gst", "Price"],
    "gst_rate": ["GST Rate (%)", "gst_rate", "GST Rate", "GST"],
    "price_after_gst": ["Price After GST (INR)", "Price After GST", "price_after_gst"],
    "hsn_code": ["HSN Code", "hsn_code", "HSN"],
    "effective_from": ["Effective From (YYYY-MM-DD)", "Effective From", "effective_from", "From"],
    "effective_to": ["Effective To (YYYY-MM-DD)", "Effective To", "effective_to", "To"],
}

# Column order shared by the export and the template
CSV_HEADERS = [
    "Supplier Name",
    "Product Name",
    "Order Count",
    "Supplier Product ID",
    "Price Before GST (INR)",
    "GST Rate (%)",
    "Price After GST (INR)",
    "HSN Code",
    "Currency",
    "Effective From (YYYY-MM-DD)",
    "Effective To (YYYY-MM-DD)",
]


@dataclass(frozen=True)
class PriceBreakdown:
    price_before_gst: Decimal
    gst_rate: Decimal
    price_after_gst: Decimal


def derive_prices(price_before_gst: Decimal, gst_rate: Decimal, price_after_gst: Decimal) -> PriceBreakdown:
    """
    Fill in whichever side of the GST pair is missing.

    - only the after-GST price given: back-calculate the base price, assuming
      the default GST rate when none is given
    - only the base price given: add GST on top
    - otherwise keep what was provided
    """
    before, rate, after = price_before_gst, gst_rate, price_after_gst

    if after > 0 and before == 0:
        if rate == 0:
            rate = Decimal(str(settings.DEFAULT_GST_RATE))
        before = money(after / (1 + rate / 100))
    elif before > 0 and after == 0:
        after = money(before * (1 + rate / 100))

    return PriceBreakdown(price_before_gst=money(before), gst_rate=money(rate), price_after_gst=money(after))


def supplier_product_id(supplier_name: str, product_name: str) -> str:
    return f"{supplier_name}{product_name}"


def _upsert_entry(db: Session, supplier: Supplier, product_name: str, values: Dict[str, Any]) -> PriceEntry:
    entry = (
        db.query(PriceEntry)
        .filter(PriceEntry.supplier_id == supplier.id, PriceEntry.product_name == product_name)
        .first()
    )
    if entry is None:
        entry = PriceEntry(supplier_id=supplier.id, product_name=product_name)
        db.add(entry)

    for field, value in values.items():
        setattr(entry, field, value)
    entry.supplier_product_id = supplier_product_id(supplier.name, product_name)
    db.flush()
    return entry


# -------------------------------------------------
# BULK IMPORT
# -------------------------------------------------

def _parse_price_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    data = {field: pick_value(row, aliases) for field, aliases in FIELD_ALIASES.items()}
    prices = derive_prices(
        parse_decimal(data["price_before_gst"]),
        parse_decimal(data["gst_rate"]),
        parse_decimal(data["price_after_gst"]),
    )
    return {
        "supplier_name": data["supplier_name"],
        "product_name": data["product_name"],
        "currency": data["currency"] or "INR",
        "hsn_code": data["hsn_code"],
        "effective_from_raw": data["effective_from"],
        "effective_to_raw": data["effective_to"],
        "prices": prices,
    }


def import_price_rows(db: Session, rows: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Bulk upsert price entries from parsed spreadsheet rows.

    Bad rows are counted and reported (first ERROR_REPORT_LIMIT messages);
    they never abort the batch. The batch itself is one transaction: if it
    cannot be written, nothing is.
    """
    success_count = 0
    error_count = 0
    errors: List[str] = []

    def reject(message: str) -> None:
        nonlocal error_count
        error_count += 1
        errors.append(message)

    try:
        for idx, row in enumerate(rows):
            line = idx + 2  # header is line 1
            parsed = _parse_price_row(row)
            prices: PriceBreakdown = parsed["prices"]

            if not (
                parsed["supplier_name"]
                and parsed["product_name"]
                and parsed["hsn_code"]
                and parsed["effective_from_raw"]
            ):
                reject(
                    f"Row {line}: Missing required fields (Supplier: {parsed['supplier_name']}, "
                    f"Product: {parsed['product_name']}, HSN: {parsed['hsn_code']}, "
                    f"From: {parsed['effective_from_raw']})"
                )
                continue

            if prices.price_after_gst <= 0:
                reject(f"Row {line}: Invalid price (Price After GST must be > 0)")
                continue

            effective_from = parse_date(parsed["effective_from_raw"])
            if effective_from is None:
                reject(f"Row {line}: Invalid Effective From date {parsed['effective_from_raw']!r}")
                continue
            effective_to = None
            if parsed["effective_to_raw"]:
                effective_to = parse_date(parsed["effective_to_raw"])
                if effective_to is None:
                    reject(f"Row {line}: Invalid Effective To date {parsed['effective_to_raw']!r}")
                    continue
                if effective_to < effective_from:
                    reject(f"Row {line}: Effective To {effective_to} is before Effective From {effective_from}")
                    continue

            try:
                with db.begin_nested():
                    supplier, _ = find_or_create_supplier(db, parsed["supplier_name"])
                    _upsert_entry(
                        db,
                        supplier,
                        parsed["product_name"],
                        {
                            "currency": parsed["currency"],
                            "price_before_gst": prices.price_before_gst,
                            "gst_rate": prices.gst_rate,
                            "price_after_gst": prices.price_after_gst,
                            "hsn_code": parsed["hsn_code"],
                            "effective_from": effective_from,
                            "effective_to": effective_to,
                        },
                    )
            except Exception as exc:
                logger.warning("Price row %d failed: %s", line, exc)
                reject(f"Row {line}: {exc}")
                continue

            success_count += 1

        db.commit()
    except Exception:
        db.rollback()
        logger.error("Price bulk import rolled back", exc_info=True)
        raise

    logger.info("Price bulk import completed: %d success, %d errors", success_count, error_count)
    return {
        "message": f"Successfully imported {success_count} price entries",
        "success_count": success_count,
        "error_count": error_count,
        "errors": errors[: settings.ERROR_REPORT_LIMIT],
    }


# -------------------------------------------------
# SINGLE ENTRY CRUD
# -------------------------------------------------

def _entry_values(payload: PriceEntryIn) -> Dict[str, Any]:
    prices = derive_prices(
        parse_decimal(payload.price_before_gst),
        parse_decimal(payload.gst_rate),
        parse_decimal(payload.price_after_gst),
    )
    if prices.price_after_gst <= 0:
        raise ValueError("Price After GST must be greater than 0")
    if payload.effective_to is not None and payload.effective_to < payload.effective_from:
        raise ValueError("effective_to must be on or after effective_from")
    return {
        "currency": payload.currency or "INR",
        "price_before_gst": prices.price_before_gst,
        "gst_rate": prices.gst_rate,
        "price_after_gst": prices.price_after_gst,
        "hsn_code": (payload.hsn_code or "").strip(),
        "effective_from": payload.effective_from,
        "effective_to": payload.effective_to,
    }


def _get_supplier(db: Session, supplier_id: int) -> Supplier:
    supplier = db.get(Supplier, supplier_id)
    if supplier is None:
        raise ValueError("Supplier not found")
    return supplier


def _product_name(payload: PriceEntryIn) -> str:
    product_name = (payload.product_name or "").strip()
    if not product_name:
        raise ValueError("product_name is required")
    return product_name


def create_or_update_entry(db: Session, payload: PriceEntryIn) -> PriceEntry:
    """Create the entry for (supplier, product) or overwrite the existing one."""
    supplier = _get_supplier(db, payload.supplier_id)
    product_name = _product_name(payload)
    values = _entry_values(payload)
    entry = _upsert_entry(db, supplier, product_name, values)
    db.commit()
    db.refresh(entry)
    return entry


def get_entry(db: Session, entry_id: int) -> PriceEntry:
    entry = db.get(PriceEntry, entry_id)
    if entry is None:
        raise ValueError("Price entry not found")
    return entry


def replace_entry(db: Session, entry_id: int, payload: PriceEntryIn) -> PriceEntry:
    """
    Full replace of one entry by id (every field comes from the payload).

    Unlike the upsert, a replace needs an HSN code and may not move the entry
    onto a supplier/product pair that already has its own entry.
    """
    entry = get_entry(db, entry_id)
    supplier = _get_supplier(db, payload.supplier_id)
    product_name = _product_name(payload)
    if not (payload.hsn_code or "").strip():
        raise ValueError("hsn_code is required")
    values = _entry_values(payload)

    clash = (
        db.query(PriceEntry.id)
        .filter(
            PriceEntry.supplier_id == supplier.id,
            PriceEntry.product_name == product_name,
            PriceEntry.id != entry.id,
        )
        .first()
    )
    if clash is not None:
        raise ValueError(DUPLICATE_ENTRY_MESSAGE)

    entry.supplier_id = supplier.id
    entry.product_name = product_name
    entry.supplier_product_id = supplier_product_id(supplier.name, product_name)
    for field, value in values.items():
        setattr(entry, field, value)

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValueError(DUPLICATE_ENTRY_MESSAGE) from exc
    db.refresh(entry)
    return entry


def delete_entry(db: Session, entry_id: int) -> None:
    entry = get_entry(db, entry_id)
    db.delete(entry)
    db.commit()


def delete_all_entries(db: Session) -> Dict[str, int]:
    """Remove every price entry and every supplier."""
    tables = available_tables(db)
    deleted_prices = 0
    deleted_suppliers = 0
    try:
        if "price_entries" in tables:
            deleted_prices = db.query(PriceEntry).delete(synchronize_session=False)
        if "suppliers" in tables:
            deleted_suppliers = db.query(Supplier).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Deleted %d price entries and %d suppliers", deleted_prices, deleted_suppliers)
    return {"deleted_prices": deleted_prices, "deleted_suppliers": deleted_suppliers}


def list_entries(db: Session, supplier: str | None = None) -> List[Dict[str, Any]]:
    """Price entries with their supplier name, newest first."""
    tables = available_tables(db)
    if "price_entries" not in tables:
        logger.warning("price_entries table not found; returning empty list")
        return []

    if "suppliers" not in tables:
        query = db.query(PriceEntry, literal("").label("supplier_name"))
    else:
        query = db.query(PriceEntry, Supplier.name.label("supplier_name")).outerjoin(
            Supplier, PriceEntry.supplier_id == Supplier.id
        )
        if supplier and supplier != "all":
            query = query.filter(Supplier.name == supplier)

    rows = query.order_by(PriceEntry.created_at.desc(), PriceEntry.id.desc()).all()
    return [entry_to_dict(entry, supplier_name or "") for entry, supplier_name in rows]


def entry_to_dict(entry: PriceEntry, supplier_name: str) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "supplier_id": entry.supplier_id,
        "supplier_name": supplier_name,
        "supplier_product_id": entry.supplier_product_id
        or supplier_product_id(supplier_name, entry.product_name),
        "product_name": entry.product_name,
        "currency": entry.currency,
        "price_before_gst": entry.price_before_gst,
        "gst_rate": entry.gst_rate,
        "price_after_gst": entry.price_after_gst,
        "hsn_code": entry.hsn_code,
        "effective_from": entry.effective_from,
        "effective_to": entry.effective_to,
        "created_at": entry.created_at,
        "updated_at": entry.updated_at,
    }


# -------------------------------------------------
# CSV EXPORT / TEMPLATE
# -------------------------------------------------

def _format_csv(records: List[List[Any]]) -> str:
    df = pd.DataFrame(records, columns=CSV_HEADERS)
    buffer = StringIO()
    df.to_csv(buffer, index=False)
    return buffer.getvalue()


def _iso(value: date | None) -> str:
    return value.isoformat() if value else ""


def export_entries_csv(db: Session) -> str:
    """
    Product database export: every price entry with the number of orders
    placed for its supplier/product pair.
    """
    tables = available_tables(db)
    records: List[List[Any]] = []
    if {"price_entries", "suppliers"} <= tables:
        query = db.query(PriceEntry, Supplier.name)
        query = query.outerjoin(Supplier, PriceEntry.supplier_id == Supplier.id)

        order_counts: Dict[int, int] = {}
        if "orders" in tables:
            join_col = supplier_join_column(db)
            counted = (
                db.query(PriceEntry.id, func.count(Order.id))
                .join(Supplier, PriceEntry.supplier_id == Supplier.id)
                .join(
                    Order,
                    (func.trim(Order.product_name) == func.trim(PriceEntry.product_name))
                    & or_(
                        func.trim(join_col) == Supplier.name,
                        func.trim(Order.pickup_warehouse) == Supplier.name,
                        func.trim(Order.fulfilled_by) == Supplier.name,
                    ),
                )
                .group_by(PriceEntry.id)
                .all()
            )
            order_counts = {entry_id: count for entry_id, count in counted}

        for entry, supplier_name in query.order_by(PriceEntry.created_at.desc(), PriceEntry.id.desc()).all():
            name = supplier_name or ""
            records.append(
                [
                    name,
                    entry.product_name,
                    order_counts.get(entry.id, 0),
                    entry.supplier_product_id or supplier_product_id(name, entry.product_name),
                    entry.price_before_gst,
                    entry.gst_rate,
                    entry.price_after_gst,
                    entry.hsn_code,
                    entry.currency or "INR",
                    _iso(entry.effective_from),
                    _iso(entry.effective_to),
                ]
            )
    return _format_csv(records)


def build_template_csv(db: Session, today: date | None = None) -> str:
    """
    Upload template pre-filled with every supplier/product pair that still
    needs a price. Validity defaults to one year from today.
    """
    today = today or date.today()
    next_year = today + relativedelta(years=1)

    missing = find_missing(db, MissingPriceOptions())
    records: List[List[Any]] = [
        [
            item.supplier_name,
            item.product_name,
            item.order_count,
            item.supplier_product_id,
            "",
            "",
            "",
            "",
            "INR",
            today.isoformat(),
            next_year.isoformat(),
        ]
        for item in missing
    ]
    if not records:
        records.append(
            [
                "Sample Supplier",
                "Sample Product",
                5,
                supplier_product_id("Sample Supplier", "Sample Product"),
                "",
                "",
                "",
                "",
                "INR",
                today.isoformat(),
                next_year.isoformat(),
            ]
        )
    return _format_csv(records)
