import logging
from typing import List, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pnl_app.core.database import available_tables, table_columns
from pnl_app.models.order import Order
from pnl_app.models.supplier import Supplier

logger = logging.getLogger(__name__)


def get_supplier_by_name(db: Session, name: str) -> Supplier | None:
    """Exact (case-sensitive) name lookup."""
    return db.query(Supplier).filter(Supplier.name == name).first()


def find_or_create_supplier(db: Session, name: str) -> Tuple[Supplier, bool]:
    """
    Return (supplier, created). Runs inside the caller's transaction; a racing
    insert of the same name resolves to the row that won.
    """
    supplier = get_supplier_by_name(db, name)
    if supplier:
        return supplier, False

    try:
        with db.begin_nested():
            supplier = Supplier(name=name)
            db.add(supplier)
            db.flush()
    except IntegrityError:
        supplier = get_supplier_by_name(db, name)
        if supplier is None:
            raise
        return supplier, False

    logger.info("Created supplier %r (id=%s)", name, supplier.id)
    return supplier, True


def create_supplier(db: Session, name: str) -> Tuple[Supplier, bool]:
    trimmed = (name or "").strip()
    if not trimmed:
        raise ValueError("name is required")
    supplier, created = find_or_create_supplier(db, trimmed)
    db.commit()
    db.refresh(supplier)
    return supplier, created


def list_suppliers(db: Session) -> List[Supplier]:
    if "suppliers" not in available_tables(db):
        logger.warning("suppliers table not found; returning empty list")
        return []
    return db.query(Supplier).order_by(Supplier.name.asc()).all()


def supplier_join_column(db: Session):
    """
    Order column used as the fallback supplier name: order_account when the
    column exists, otherwise pickup_warehouse.
    """
    if "order_account" in table_columns(db, "orders"):
        return Order.order_account
    return Order.pickup_warehouse


def list_pickup_warehouses(db: Session, force_pickup_warehouse: bool = False) -> List[str]:
    """Distinct non-empty warehouse names seen on orders."""
    if "orders" not in available_tables(db):
        logger.warning("orders table not found; returning empty warehouses list")
        return []

    column = Order.pickup_warehouse if force_pickup_warehouse else supplier_join_column(db)
    rows = (
        db.query(column)
        .filter(column.isnot(None), column != "")
        .distinct()
        .order_by(column)
        .all()
    )
    return [row[0] for row in rows if row[0]]


def products_for_supplier(db: Session, supplier_name: str) -> List[str]:
    """Distinct product names ordered from a supplier (pickup warehouse or order account)."""
    name = (supplier_name or "").strip()
    if not name or "orders" not in available_tables(db):
        return []

    match = func.trim(Order.pickup_warehouse) == name
    if "order_account" in table_columns(db, "orders"):
        match = match | (func.trim(Order.order_account) == name)

    rows = (
        db.query(Order.product_name)
        .filter(match, Order.product_name.isnot(None), Order.product_name != "")
        .distinct()
        .order_by(Order.product_name)
        .all()
    )
    return [row[0] for row in rows]
