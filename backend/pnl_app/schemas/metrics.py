from datetime import date
from decimal import Decimal
from typing import List

from pydantic import BaseModel


class PeriodFigures(BaseModel):
    revenue: Decimal = Decimal("0")
    product_cost: Decimal = Decimal("0")
    shipping_costs: Decimal = Decimal("0")
    marketing_spend: Decimal = Decimal("0")
    net_profit: Decimal = Decimal("0")
    profit_margin: float = 0.0
    order_count: int = 0


class MetricChanges(BaseModel):
    revenue: float = 0.0
    product_cost: float = 0.0
    shipping_costs: float = 0.0
    marketing_spend: float = 0.0
    net_profit: float = 0.0


class TrendPoint(BaseModel):
    date: date
    revenue: Decimal
    product_cost: Decimal
    shipping_costs: Decimal
    marketing_spend: Decimal
    profit: Decimal


class ChannelBreakdownItem(BaseModel):
    channel: str
    order_count: int
    revenue: Decimal


class ProductPerformanceItem(BaseModel):
    product_name: str
    order_count: int
    revenue: Decimal
    product_cost: Decimal


class OrderModeSummary(BaseModel):
    cod_orders: int = 0
    ppd_orders: int = 0
    cod_amount: Decimal = Decimal("0")
    ppd_amount: Decimal = Decimal("0")
    shipped_orders: int = 0


class MetricsReport(BaseModel):
    start_date: date
    end_date: date
    show_all: bool = False
    current: PeriodFigures
    previous: PeriodFigures
    changes: MetricChanges
    trends: List[TrendPoint] = []
    channel_breakdown: List[ChannelBreakdownItem] = []
    product_performance: List[ProductPerformanceItem] = []
    order_modes: OrderModeSummary = OrderModeSummary()
