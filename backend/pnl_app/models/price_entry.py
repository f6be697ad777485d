from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from pnl_app.models.base import Base


class PriceEntry(Base):
    __tablename__ = "price_entries"
    __table_args__ = (
        # One row per (supplier, product); a newer upload overwrites the old one.
        UniqueConstraint("supplier_id", "product_name", name="uq_price_entries_supplier_product"),
        Index("ix_price_entries_product_name", "product_name"),
        Index("ix_price_entries_effective", "effective_from", "effective_to"),
    )

    id = Column(Integer, primary_key=True, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False)
    product_name = Column(String(255), nullable=False)

    currency = Column(String(10), nullable=False, default="INR")
    price_before_gst = Column(Numeric(10, 2), nullable=False, default=0)
    gst_rate = Column(Numeric(5, 2), nullable=False, default=0)  # percent, 18 == 18%
    price_after_gst = Column(Numeric(10, 2), nullable=False, default=0)
    hsn_code = Column(String(50), nullable=False, default="")

    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)  # NULL == open ended

    # Display-only "<supplier name><product name>", never parsed back
    supplier_product_id = Column(String(512), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    supplier = relationship("Supplier", back_populates="price_entries")
