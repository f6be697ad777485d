import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pnl_app.deps import get_db
from pnl_app.schemas.orders import DeleteResult
from pnl_app.services.order_import_service import delete_all_orders, delete_all_shipping_costs

router = APIRouter()
logger = logging.getLogger(__name__)


@router.delete("/orders", response_model=DeleteResult, summary="Delete every order", tags=["Orders"])
def delete_orders_api(db: Session = Depends(get_db)):
    try:
        return delete_all_orders(db)
    except Exception as e:
        logger.error("Failed to delete orders: %s", e, exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to delete orders: {e}")


@router.delete(
    "/shipping-costs",
    response_model=DeleteResult,
    summary="Delete every shipping cost",
    tags=["Shipping"],
)
def delete_shipping_costs_api(db: Session = Depends(get_db)):
    try:
        return delete_all_shipping_costs(db)
    except Exception as e:
        logger.error("Failed to delete shipping costs: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete shipping costs: {e}",
        )
