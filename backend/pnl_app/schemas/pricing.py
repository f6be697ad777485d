from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class SupplierCreate(BaseModel):
    name: str = Field(..., min_length=1)


class SupplierOut(BaseModel):
    id: int
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True  # Pydantic v2 compatible


class PriceEntryIn(BaseModel):
    supplier_id: int
    product_name: str = Field(..., min_length=1)
    currency: str = "INR"
    price_before_gst: Optional[Decimal] = None
    gst_rate: Optional[Decimal] = None
    price_after_gst: Optional[Decimal] = None
    hsn_code: str = ""
    effective_from: date
    effective_to: Optional[date] = None


class PriceEntryOut(BaseModel):
    id: int
    supplier_id: int
    supplier_name: Optional[str] = None
    supplier_product_id: Optional[str] = None
    product_name: str
    currency: Optional[str] = None
    price_before_gst: Optional[Decimal] = None
    gst_rate: Optional[Decimal] = None
    price_after_gst: Optional[Decimal] = None
    hsn_code: Optional[str] = None
    effective_from: date
    effective_to: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MissingPriceOut(BaseModel):
    supplier_name: str
    product_name: str
    order_count: int
    latest_order_date: Optional[date] = None
    supplier_id: Optional[int] = None
    supplier_product_id: str
    needs_pricing: bool = True

    class Config:
        from_attributes = True


class BulkImportResult(BaseModel):
    message: str
    success_count: int
    error_count: int
    errors: List[str] = []
