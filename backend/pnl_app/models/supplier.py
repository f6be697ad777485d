from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from pnl_app.models.base import Base


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    price_entries = relationship(
        "PriceEntry",
        back_populates="supplier",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
