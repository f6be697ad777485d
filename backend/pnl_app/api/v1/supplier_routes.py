from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from pnl_app.deps import get_db
from pnl_app.schemas.pricing import SupplierCreate, SupplierOut
from pnl_app.services.supplier_service import (
    create_supplier,
    list_pickup_warehouses,
    list_suppliers,
    products_for_supplier,
)

router = APIRouter()


@router.get("", response_model=List[SupplierOut], summary="List suppliers")
def list_suppliers_api(db: Session = Depends(get_db)) -> List[SupplierOut]:
    return list_suppliers(db)


@router.post(
    "",
    response_model=SupplierOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a supplier (returns the existing one on duplicate names)",
)
def create_supplier_api(payload: SupplierCreate, response: Response, db: Session = Depends(get_db)):
    try:
        supplier, created = create_supplier(db, payload.name)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if not created:
        response.status_code = status.HTTP_200_OK
    return supplier


@router.get("/pickup-warehouses", response_model=List[str], summary="Warehouse names seen on orders")
def pickup_warehouses_api(
    force_pickup_warehouse: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> List[str]:
    return list_pickup_warehouses(db, force_pickup_warehouse=force_pickup_warehouse)


@router.get("/products", response_model=List[str], summary="Products ordered from a supplier")
def supplier_products_api(
    supplier: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
) -> List[str]:
    return products_for_supplier(db, supplier)
