import enum

from sqlalchemy import Column, Date, DateTime, Enum, Index, Integer, Numeric, String, func

from pnl_app.models.base import Base


class OrderStatusClass(str, enum.Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


def classify_status(status: str | None) -> OrderStatusClass:
    """Any status containing 'cancel' (any case) is a cancellation."""
    if status and "cancel" in str(status).lower():
        return OrderStatusClass.CANCELLED
    return OrderStatusClass.ACTIVE


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_order_date", "order_date"),
        Index("ix_orders_status_class", "status_class"),
    )

    id = Column(Integer, primary_key=True, index=True)

    channel = Column(String(100), nullable=True)
    order_date = Column(Date, nullable=False)
    fulfilled_by = Column(String(100), nullable=True)
    delivered_date = Column(Date, nullable=True)
    product_name = Column(String(255), nullable=True)
    order_amount = Column(Numeric(12, 2), nullable=False, default=0)

    # Supplier side of the order; matched against suppliers.name
    pickup_warehouse = Column(String(255), nullable=True)
    order_account = Column(String(255), nullable=True)

    waybill_number = Column(String(255), nullable=True)
    product_value = Column(Numeric(12, 2), nullable=False, default=0)
    mode = Column(String(100), nullable=True)  # cod / ppd / other

    status = Column(String(100), nullable=False, default="pending")
    status_class = Column(
        Enum(OrderStatusClass, name="order_status_class", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OrderStatusClass.ACTIVE,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
