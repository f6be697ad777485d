"""
Dashboard metrics.

Revenue and product cost only count orders that resolve to a price entry in
force on the order date (supplier matched on the store column, product on
the trimmed name). Shipping joins on fulfilled_by, marketing is a plain sum
over the window. Cancelled orders never count.
"""
import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Sequence, Tuple

from sqlalchemy import and_, case, distinct, func, select
from sqlalchemy.orm import Session

from pnl_app.core.config import settings
from pnl_app.core.database import available_tables, table_columns
from pnl_app.models.marketing import MarketingSpend
from pnl_app.models.order import Order, OrderStatusClass
from pnl_app.models.price_entry import PriceEntry
from pnl_app.models.shipping import ShippingCost
from pnl_app.models.supplier import Supplier
from pnl_app.schemas.metrics import (
    ChannelBreakdownItem,
    MetricChanges,
    MetricsReport,
    OrderModeSummary,
    PeriodFigures,
    ProductPerformanceItem,
    TrendPoint,
)
from pnl_app.services.price_resolver import effective_on
from pnl_app.utils.value_parser import ZERO

logger = logging.getLogger(__name__)

DEFAULT_START = date(2024, 1, 1)


def _dec(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def previous_period(start: date, end: date) -> Tuple[date, date]:
    """Window of the same length as [start, end] that ends the day before start."""
    prev_end = start - timedelta(days=1)
    prev_start = prev_end - (end - start)
    return prev_start, prev_end


def percent_change(current: Decimal | float, previous: Decimal | float) -> float:
    """Relative change in percent; growth from zero counts as +100."""
    current, previous = _dec(current), _dec(previous)
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return float((current - previous) / previous * 100)


def store_filter_column(db: Session):
    columns = table_columns(db, "orders")
    if "pickup_warehouse" not in columns and "order_account" in columns:
        return Order.order_account
    return Order.pickup_warehouse


class _MetricsQuery:
    """Shared filters for one report: window, active orders, optional stores."""

    def __init__(self, db: Session, stores: Sequence[str]):
        self.db = db
        self.stores = [s for s in stores if s]
        self.tables = available_tables(db)
        self.store_column = store_filter_column(db) if "orders" in self.tables else Order.pickup_warehouse

    @property
    def has_orders(self) -> bool:
        return "orders" in self.tables

    @property
    def has_prices(self) -> bool:
        return {"orders", "suppliers", "price_entries"} <= self.tables

    @property
    def has_shipping(self) -> bool:
        return {"orders", "shipping_costs"} <= self.tables

    @property
    def has_marketing(self) -> bool:
        return "marketing_spend" in self.tables

    def order_filters(self, start: date, end: date) -> List[Any]:
        filters = [
            Order.order_date >= start,
            Order.order_date <= end,
            Order.status_class == OrderStatusClass.ACTIVE,
        ]
        if self.stores:
            filters.append(self.store_column.in_(self.stores))
        return filters

    def priced(self, start: date, end: date, *columns):
        """SELECT `columns` over orders joined to the price entry in force on the order date."""
        return (
            select(*columns)
            .select_from(Order)
            .join(Supplier, func.trim(self.store_column) == func.trim(Supplier.name))
            .join(
                PriceEntry,
                and_(
                    PriceEntry.supplier_id == Supplier.id,
                    func.trim(PriceEntry.product_name) == func.trim(Order.product_name),
                    effective_on(Order.order_date),
                ),
            )
            .where(*self.order_filters(start, end))
        )

    def shipped(self, start: date, end: date, *columns):
        return (
            select(*columns)
            .select_from(Order)
            .join(ShippingCost, func.trim(Order.fulfilled_by) == func.trim(ShippingCost.region))
            .where(*self.order_filters(start, end))
        )

    # -- period totals -------------------------------------------------

    def revenue_and_cost(self, start: date, end: date) -> Tuple[Decimal, Decimal, int]:
        if not self.has_prices:
            return ZERO, ZERO, 0
        row = self.db.execute(
            self.priced(
                start,
                end,
                func.coalesce(func.sum(Order.order_amount), 0).label("revenue"),
                func.coalesce(func.sum(PriceEntry.price_after_gst), 0).label("cost"),
                func.count().label("matched_rows"),
                func.count(distinct(Order.id)).label("order_count"),
            )
        ).one()
        matched_rows, order_count = int(row.matched_rows or 0), int(row.order_count or 0)
        if matched_rows > order_count:
            # Every effective entry joins, so overlapping entries count an order more than once
            logger.warning(
                "%d orders between %s and %s matched more than one effective price entry; "
                "revenue and cost include %d extra rows. Check for product names that differ only by spaces.",
                self.overlapping_orders(start, end),
                start,
                end,
                matched_rows - order_count,
            )
        return _dec(row.revenue), _dec(row.cost), order_count

    def overlapping_orders(self, start: date, end: date) -> int:
        per_order = (
            self.priced(start, end, Order.id)
            .group_by(Order.id)
            .having(func.count() > 1)
            .subquery("overlapping_orders")
        )
        return self.db.execute(select(func.count()).select_from(per_order)).scalar() or 0

    def shipping_total(self, start: date, end: date) -> Decimal:
        if not self.has_shipping:
            return ZERO
        total = self.db.execute(
            self.shipped(start, end, func.coalesce(func.sum(ShippingCost.shipping_cost), 0))
        ).scalar()
        return _dec(total)

    def marketing_total(self, start: date, end: date) -> Decimal:
        if not self.has_marketing:
            return ZERO
        total = self.db.execute(
            select(func.coalesce(func.sum(MarketingSpend.amount), 0)).where(
                MarketingSpend.spend_date >= start,
                MarketingSpend.spend_date <= end,
            )
        ).scalar()
        return _dec(total)

    def period(self, start: date, end: date) -> PeriodFigures:
        revenue, cost, order_count = self.revenue_and_cost(start, end)
        shipping = self.shipping_total(start, end)
        marketing = self.marketing_total(start, end)
        net_profit = revenue - cost - shipping - marketing
        margin = float(net_profit / revenue * 100) if revenue > 0 else 0.0
        return PeriodFigures(
            revenue=revenue,
            product_cost=cost,
            shipping_costs=shipping,
            marketing_spend=marketing,
            net_profit=net_profit,
            profit_margin=margin,
            order_count=order_count,
        )

    # -- breakdowns ----------------------------------------------------

    def trends(self, start: date, end: date) -> List[TrendPoint]:
        buckets: Dict[date, Dict[str, Decimal]] = defaultdict(
            lambda: {"revenue": ZERO, "product_cost": ZERO, "shipping_costs": ZERO, "marketing_spend": ZERO}
        )

        if self.has_prices:
            stmt = self.priced(
                start,
                end,
                Order.order_date,
                func.coalesce(func.sum(Order.order_amount), 0),
                func.coalesce(func.sum(PriceEntry.price_after_gst), 0),
            ).group_by(Order.order_date)
            for day, revenue, cost in self.db.execute(stmt):
                buckets[day]["revenue"] += _dec(revenue)
                buckets[day]["product_cost"] += _dec(cost)

        if self.has_shipping:
            stmt = self.shipped(
                start,
                end,
                Order.order_date,
                func.coalesce(func.sum(ShippingCost.shipping_cost), 0),
            ).group_by(Order.order_date)
            for day, cost in self.db.execute(stmt):
                buckets[day]["shipping_costs"] += _dec(cost)

        if self.has_marketing:
            stmt = (
                select(MarketingSpend.spend_date, func.coalesce(func.sum(MarketingSpend.amount), 0))
                .where(MarketingSpend.spend_date >= start, MarketingSpend.spend_date <= end)
                .group_by(MarketingSpend.spend_date)
            )
            for day, amount in self.db.execute(stmt):
                buckets[day]["marketing_spend"] += _dec(amount)

        points = []
        for day in sorted(buckets):
            values = buckets[day]
            profit = values["revenue"] - values["product_cost"] - values["shipping_costs"] - values["marketing_spend"]
            points.append(TrendPoint(date=day, profit=profit, **values))
        return points

    def channels(self, start: date, end: date) -> List[ChannelBreakdownItem]:
        if not self.has_prices:
            return []
        stmt = self.priced(
            start,
            end,
            Order.channel,
            func.count().label("order_count"),
            func.coalesce(func.sum(Order.order_amount), 0).label("revenue"),
        ).group_by(Order.channel)
        items = [
            ChannelBreakdownItem(channel=row.channel or "Unknown", order_count=row.order_count, revenue=_dec(row.revenue))
            for row in self.db.execute(stmt)
        ]
        return sorted(items, key=lambda item: item.revenue, reverse=True)

    def products(self, start: date, end: date) -> List[ProductPerformanceItem]:
        if not self.has_prices:
            return []
        revenue = func.coalesce(func.sum(Order.order_amount), 0).label("revenue")
        stmt = (
            self.priced(
                start,
                end,
                PriceEntry.product_name,
                func.count(Order.id).label("order_count"),
                revenue,
                func.coalesce(func.sum(PriceEntry.price_after_gst), 0).label("product_cost"),
            )
            .group_by(PriceEntry.product_name)
            .order_by(revenue.desc(), PriceEntry.product_name)
        )
        return [
            ProductPerformanceItem(
                product_name=row.product_name,
                order_count=row.order_count,
                revenue=_dec(row.revenue),
                product_cost=_dec(row.product_cost),
            )
            for row in self.db.execute(stmt)
        ]

    def order_modes(self, start: date, end: date) -> OrderModeSummary:
        """COD/prepaid split over every active order in the window, priced or not."""
        if not self.has_orders:
            return OrderModeSummary()
        mode = func.lower(func.trim(Order.mode))
        row = self.db.execute(
            select(
                func.count(case((mode == "cod", 1))).label("cod_orders"),
                func.count(case((mode == "ppd", 1))).label("ppd_orders"),
                func.coalesce(func.sum(case((mode == "cod", Order.order_amount), else_=0)), 0).label("cod_amount"),
                func.coalesce(func.sum(case((mode == "ppd", Order.order_amount), else_=0)), 0).label("ppd_amount"),
                func.count().label("shipped_orders"),
            )
            .select_from(Order)
            .where(*self.order_filters(start, end))
        ).one()
        return OrderModeSummary(
            cod_orders=row.cod_orders or 0,
            ppd_orders=row.ppd_orders or 0,
            cod_amount=_dec(row.cod_amount),
            ppd_amount=_dec(row.ppd_amount),
            shipped_orders=row.shipped_orders or 0,
        )


def compute_metrics(
    db: Session,
    start_date: date | None = None,
    end_date: date | None = None,
    stores: Sequence[str] = (),
    show_all: bool | None = None,
    today: date | None = None,
) -> MetricsReport:
    """
    Build the dashboard report for [start_date, end_date].

    With show_all (the default when neither bound is given) the window runs
    from ALL_DATA_START to today and there is no previous-period comparison.
    """
    today = today or date.today()
    if show_all is None:
        show_all = start_date is None and end_date is None

    if show_all:
        start, end = settings.ALL_DATA_START, today
    else:
        start = start_date or DEFAULT_START
        end = end_date or today
    if start > end:
        raise ValueError("start_date must be on or before end_date")

    query = _MetricsQuery(db, stores)
    if not query.has_orders:
        logger.warning("orders table not found; metrics will be empty")

    current = query.period(start, end)
    if show_all:
        previous = PeriodFigures()
        changes = MetricChanges()
    else:
        prev_start, prev_end = previous_period(start, end)
        previous = query.period(prev_start, prev_end)
        changes = MetricChanges(
            revenue=percent_change(current.revenue, previous.revenue),
            product_cost=percent_change(current.product_cost, previous.product_cost),
            shipping_costs=percent_change(current.shipping_costs, previous.shipping_costs),
            marketing_spend=percent_change(current.marketing_spend, previous.marketing_spend),
            net_profit=percent_change(current.net_profit, previous.net_profit),
        )

    logger.info(
        "Metrics %s..%s stores=%s: revenue=%s cost=%s orders=%d",
        start,
        end,
        query.stores or "all",
        current.revenue,
        current.product_cost,
        current.order_count,
    )

    return MetricsReport(
        start_date=start,
        end_date=end,
        show_all=show_all,
        current=current,
        previous=previous,
        changes=changes,
        trends=query.trends(start, end),
        channel_breakdown=query.channels(start, end),
        product_performance=query.products(start, end),
        order_modes=query.order_modes(start, end),
    )
