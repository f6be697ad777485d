from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class ImportResult(BaseModel):
    message: str
    count: int
    skipped: int = 0


class DeleteResult(BaseModel):
    deleted: int


class MarketingSpendIn(BaseModel):
    spend_date: date
    amount: Decimal
    channel: Optional[str] = None
    notes: Optional[str] = None


class MarketingSpendOut(MarketingSpendIn):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
