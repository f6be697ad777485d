import logging
from typing import Any, Dict, List, Mapping, Sequence

from sqlalchemy import insert, text
from sqlalchemy.orm import Session

from pnl_app.core.config import settings
from pnl_app.core.database import available_tables
from pnl_app.models.order import Order, classify_status
from pnl_app.models.shipping import ShippingCost
from pnl_app.utils.text_cleaner import pick_value
from pnl_app.utils.value_parser import parse_date, parse_decimal

logger = logging.getLogger(__name__)


# Allowed column aliases from the upload -> order field (case/space-insensitive)
ORDER_ALIASES: Dict[str, List[str]] = {
    "channel_order_date": ["Channel Order Date", "channel_order_date"],
    "order_date": ["Order Date", "order_date"],
    "channel": ["Channel", "channel", "Sales Channel"],
    "fulfilled_by": ["Fulfilled By", "fulfilled_by"],
    "delivered_date": ["Delivered Date", "delivered_date"],
    "product_name": ["Product Name", "product_name"],
    "order_amount": ["Order Amount", "order_amount"],
    "pickup_warehouse": ["Pickup Warehouse", "pickup_warehouse"],
    "order_account": ["Order Account", "order_account"],
    "waybill_number": ["WayBill Number", "Waybill Number", "waybill_number", "AWB"],
    "product_value": ["Product Value", "product_value"],
    "mode": ["Mode", "mode", "Payment Mode"],
    "status": ["Status", "status"],
}

SHIPPING_ALIASES: Dict[str, List[str]] = {
    "region": ["Fulfilled By", "fulfilled_by", "Region", "region"],
    "shipping_cost": ["Shipping Cost", "shipping_cost"],
}


def _reset_identity(db: Session, table_name: str) -> None:
    """
    Restart the primary key counter of an emptied table.

    SQLite reuses max(rowid)+1 on its own. MySQL's ALTER TABLE would commit
    the open transaction, so it is left alone there.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        db.execute(text(f"SELECT setval(pg_get_serial_sequence('{table_name}', 'id'), 1, false)"))


def _order_values(row: Mapping[str, Any]) -> Dict[str, Any] | None:
    """Map one upload row to Order column values, or None when the row must be skipped."""
    data = {field: pick_value(row, aliases) for field, aliases in ORDER_ALIASES.items()}

    raw_order_date = data["order_date"] or data["channel_order_date"]
    product_name = data["product_name"]
    if not raw_order_date or not product_name:
        return None

    order_date = parse_date(raw_order_date)
    if order_date is None:
        return None

    fulfilled_by = data["fulfilled_by"] or None
    status = data["status"] or "pending"
    return {
        "channel": data["channel"] or fulfilled_by or "Unknown",
        "order_date": order_date,
        "fulfilled_by": fulfilled_by,
        "delivered_date": parse_date(data["delivered_date"]),
        "product_name": product_name,
        "order_amount": parse_decimal(data["order_amount"]),
        "pickup_warehouse": data["pickup_warehouse"] or None,
        "order_account": data["order_account"] or None,
        "waybill_number": data["waybill_number"] or None,
        "product_value": parse_decimal(data["product_value"]),
        "mode": data["mode"] or None,
        "status": status,
        "status_class": classify_status(status),
    }


def _insert_in_batches(db: Session, model, values: List[Dict[str, Any]]) -> int:
    batch_size = max(settings.IMPORT_BATCH_SIZE, 1)
    inserted = 0
    for start in range(0, len(values), batch_size):
        batch = values[start:start + batch_size]
        db.execute(insert(model), batch)
        inserted += len(batch)
        logger.debug(
            "Inserted %s batch %d: %d rows (total %d/%d)",
            model.__tablename__,
            start // batch_size + 1,
            len(batch),
            inserted,
            len(values),
        )
    return inserted


def import_orders(db: Session, rows: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Replace every stored order with the uploaded rows.

    Rows without an order date (or channel order date) or product name, and
    rows whose order date cannot be read, are skipped and counted. The
    delete and all inserts share one transaction.
    """
    values: List[Dict[str, Any]] = []
    skipped = 0
    for row in rows:
        mapped = _order_values(row)
        if mapped is None:
            skipped += 1
            continue
        values.append(mapped)

    if not values:
        headers = ", ".join(str(k) for k in (rows[0].keys() if rows else []))
        raise ValueError(
            f"No valid rows found. Skipped {skipped} rows. Please check column names. "
            f"Available columns in first row: {headers}"
        )

    try:
        deleted = db.query(Order).delete(synchronize_session=False)
        _reset_identity(db, Order.__tablename__)
        logger.info("Deleted %d existing orders before import", deleted)
        inserted = _insert_in_batches(db, Order, values)
        db.commit()
    except Exception:
        db.rollback()
        logger.error("Order import rolled back", exc_info=True)
        raise

    logger.info("Imported %d orders (%d skipped)", inserted, skipped)
    message = f"Successfully imported {inserted} orders"
    if skipped:
        message += f" ({skipped} skipped)"
    return {"message": message, "count": inserted, "skipped": skipped}


def import_shipping_costs(db: Session, rows: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """Replace every shipping cost row; rows without a region or a cost are skipped."""
    values: List[Dict[str, Any]] = []
    skipped = 0
    for row in rows:
        region = pick_value(row, SHIPPING_ALIASES["region"])
        cost = parse_decimal(pick_value(row, SHIPPING_ALIASES["shipping_cost"]))
        if not region or cost == 0:
            skipped += 1
            continue
        values.append({"region": region, "weight_range": "", "shipping_cost": cost})

    try:
        deleted = db.query(ShippingCost).delete(synchronize_session=False)
        _reset_identity(db, ShippingCost.__tablename__)
        logger.info("Deleted %d existing shipping costs before import", deleted)
        inserted = _insert_in_batches(db, ShippingCost, values)
        db.commit()
    except Exception:
        db.rollback()
        logger.error("Shipping cost import rolled back", exc_info=True)
        raise

    return {
        "message": f"Successfully imported {inserted} shipping cost entries",
        "count": inserted,
        "skipped": skipped,
    }


def delete_all_orders(db: Session) -> Dict[str, int]:
    if "orders" not in available_tables(db):
        return {"deleted": 0}
    try:
        deleted = db.query(Order).delete(synchronize_session=False)
        _reset_identity(db, Order.__tablename__)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted all orders (%d rows)", deleted)
    return {"deleted": deleted}


def delete_all_shipping_costs(db: Session) -> Dict[str, int]:
    if "shipping_costs" not in available_tables(db):
        return {"deleted": 0}
    try:
        deleted = db.query(ShippingCost).delete(synchronize_session=False)
        _reset_identity(db, ShippingCost.__tablename__)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted all shipping costs (%d rows)", deleted)
    return {"deleted": deleted}
