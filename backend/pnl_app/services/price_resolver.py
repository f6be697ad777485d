import logging
from datetime import date
from typing import List

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from pnl_app.core.database import available_tables
from pnl_app.models.price_entry import PriceEntry
from pnl_app.models.supplier import Supplier

logger = logging.getLogger(__name__)


def effective_on(on_date):
    """
    SQL predicate: the price entry is valid on `on_date` (a date or a date column).
    Both bounds are inclusive; a NULL effective_to never expires.
    """
    return and_(
        PriceEntry.effective_from <= on_date,
        or_(PriceEntry.effective_to.is_(None), on_date <= PriceEntry.effective_to),
    )


def is_effective(entry: PriceEntry, on_date: date) -> bool:
    if entry.effective_from is None or entry.effective_from > on_date:
        return False
    return entry.effective_to is None or on_date <= entry.effective_to


def find_effective_entries(
    db: Session,
    supplier_name: str,
    product_name: str,
    on_date: date,
) -> List[PriceEntry]:
    """
    Every price entry for the supplier/product pair that is valid on `on_date`.

    Supplier names are compared trimmed but case-sensitive.
    """
    tables = available_tables(db)
    if not {"suppliers", "price_entries"} <= tables:
        return []

    supplier_name = (supplier_name or "").strip()
    product_name = (product_name or "").strip()
    if not supplier_name or not product_name:
        return []

    return (
        db.query(PriceEntry)
        .join(Supplier, PriceEntry.supplier_id == Supplier.id)
        .filter(
            func.trim(Supplier.name) == supplier_name,
            func.trim(PriceEntry.product_name) == product_name,
            effective_on(on_date),
        )
        .order_by(PriceEntry.id.asc())
        .all()
    )


def resolve_price(
    db: Session,
    supplier_name: str,
    product_name: str,
    on_date: date,
) -> PriceEntry | None:
    """
    Price entry in force for the supplier/product on `on_date`, or None.

    Overlapping validity windows are a data problem: the lowest id wins and
    the overlap is logged so it can be cleaned up.
    """
    matches = find_effective_entries(db, supplier_name, product_name, on_date)
    if not matches:
        return None
    if len(matches) > 1:
        logger.warning(
            "Ambiguous price for supplier=%r product=%r on %s: entries %s overlap; using %s",
            supplier_name,
            product_name,
            on_date,
            [m.id for m in matches],
            matches[0].id,
        )
    return matches[0]
