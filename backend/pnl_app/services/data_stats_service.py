from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from pnl_app.core.database import available_tables
from pnl_app.models.marketing import MarketingSpend
from pnl_app.models.order import Order
from pnl_app.models.price_entry import PriceEntry
from pnl_app.models.shipping import ShippingCost
from pnl_app.models.supplier import Supplier
from pnl_app.utils.value_parser import ZERO


def collect_data_stats(db: Session) -> Dict[str, Any]:
    """Row counts and freshness of every uploaded dataset; missing tables report zeros."""
    tables = available_tables(db)

    orders = {"count": 0, "latest_upload": None, "oldest_order": None, "newest_order": None}
    if "orders" in tables:
        count, latest, oldest, newest = db.query(
            func.count(Order.id),
            func.max(Order.created_at),
            func.min(Order.order_date),
            func.max(Order.order_date),
        ).one()
        orders = {"count": count, "latest_upload": latest, "oldest_order": oldest, "newest_order": newest}

    shipping = {"count": 0, "latest_upload": None}
    if "shipping_costs" in tables:
        count, latest = db.query(func.count(ShippingCost.id), func.max(ShippingCost.created_at)).one()
        shipping = {"count": count, "latest_upload": latest}

    marketing = {"count": 0, "latest_upload": None, "total_amount": ZERO}
    if "marketing_spend" in tables:
        count, latest, total = db.query(
            func.count(MarketingSpend.id),
            func.max(MarketingSpend.created_at),
            func.coalesce(func.sum(MarketingSpend.amount), 0),
        ).one()
        marketing = {"count": count, "latest_upload": latest, "total_amount": total}

    prices = {"count": 0, "supplier_count": 0, "latest_upload": None}
    if "price_entries" in tables:
        count, latest = db.query(func.count(PriceEntry.id), func.max(PriceEntry.updated_at)).one()
        prices["count"] = count
        prices["latest_upload"] = latest
    if "suppliers" in tables:
        prices["supplier_count"] = db.query(func.count(Supplier.id)).scalar() or 0

    return {"orders": orders, "shipping_costs": shipping, "marketing_spend": marketing, "price_entries": prices}
