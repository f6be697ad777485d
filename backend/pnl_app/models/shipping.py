from sqlalchemy import Column, DateTime, Integer, Numeric, String, func

from pnl_app.models.base import Base


class ShippingCost(Base):
    __tablename__ = "shipping_costs"

    id = Column(Integer, primary_key=True, index=True)
    region = Column(String(100), nullable=False)  # holds the order's fulfilled_by value
    weight_range = Column(String(100), nullable=False, default="")
    shipping_cost = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
