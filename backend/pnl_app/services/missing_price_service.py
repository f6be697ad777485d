"""
Missing price detection.

Orders are grouped by (supplier name, product name) and every group that has
no price entry is reported, busiest first. The supplier name of an order is
the first non-empty of: pickup warehouse, the configured join column
(order_account when the column exists), fulfilled_by, then "Unknown".
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List

from sqlalchemy import and_, func, null, select
from sqlalchemy.orm import Session

from pnl_app.core.config import settings
from pnl_app.core.database import available_tables
from pnl_app.models.order import Order
from pnl_app.models.price_entry import PriceEntry
from pnl_app.models.supplier import Supplier
from pnl_app.services.price_resolver import effective_on
from pnl_app.services.supplier_service import supplier_join_column

logger = logging.getLogger(__name__)


@dataclass
class MissingPriceOptions:
    limit: int = field(default_factory=lambda: settings.MISSING_PRICE_LIMIT)
    # Also treat orders outside every validity window of their pair as unpriced
    check_validity: bool = False


@dataclass
class MissingPriceRecord:
    supplier_name: str
    product_name: str
    order_count: int
    latest_order_date: date | None
    supplier_id: int | None
    supplier_product_id: str
    needs_pricing: bool = True


def supplier_name_expression(db: Session):
    join_col = supplier_join_column(db)
    return func.coalesce(
        func.nullif(func.trim(Order.pickup_warehouse), ""),
        func.nullif(func.trim(join_col), ""),
        func.nullif(func.trim(Order.fulfilled_by), ""),
        "Unknown",
    )


def find_missing(db: Session, options: MissingPriceOptions | None = None) -> List[MissingPriceRecord]:
    """Supplier/product pairs seen on orders that have no usable price entry."""
    options = options or MissingPriceOptions()
    tables = available_tables(db)
    if "orders" not in tables:
        logger.warning("orders table not found; no missing prices to report")
        return []

    product_expr = func.trim(Order.product_name)
    orders = (
        select(
            supplier_name_expression(db).label("supplier_name"),
            product_expr.label("product_name"),
            Order.order_date.label("order_date"),
        )
        .where(Order.product_name.isnot(None), product_expr != "")
        .subquery("grouped_orders")
    )

    has_suppliers = "suppliers" in tables
    has_prices = has_suppliers and "price_entries" in tables
    if not has_prices:
        logger.warning("suppliers/price_entries table not found; every order pair is reported as missing")

    order_count = func.count().label("order_count")
    supplier_id_col = Supplier.id if has_suppliers else null()

    stmt = select(
        orders.c.supplier_name,
        orders.c.product_name,
        order_count,
        func.max(orders.c.order_date).label("latest_order_date"),
        supplier_id_col.label("supplier_id"),
    ).select_from(orders)

    group_by = [orders.c.supplier_name, orders.c.product_name]
    if has_suppliers:
        stmt = stmt.outerjoin(Supplier, Supplier.name == orders.c.supplier_name)
        group_by.append(Supplier.id)
    if has_prices:
        price_match = and_(
            PriceEntry.supplier_id == Supplier.id,
            func.trim(PriceEntry.product_name) == orders.c.product_name,
        )
        if options.check_validity:
            price_match = and_(price_match, effective_on(orders.c.order_date))
        stmt = stmt.outerjoin(PriceEntry, price_match).where(PriceEntry.id.is_(None))

    stmt = (
        stmt.group_by(*group_by)
        .order_by(order_count.desc(), orders.c.supplier_name, orders.c.product_name)
        .limit(options.limit)
    )

    return [
        MissingPriceRecord(
            supplier_name=row.supplier_name,
            product_name=row.product_name,
            order_count=int(row.order_count),
            latest_order_date=row.latest_order_date,
            supplier_id=row.supplier_id,
            supplier_product_id=f"{row.supplier_name}{row.product_name}",
        )
        for row in db.execute(stmt)
    ]
