# pnl_app/api/v1/upload_routes.py

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from pnl_app.deps import get_db
from pnl_app.schemas.orders import ImportResult
from pnl_app.services.order_import_service import import_orders, import_shipping_costs
from pnl_app.utils.file_reader import FileReadError, read_rows

router = APIRouter()
logger = logging.getLogger(__name__)


async def read_upload(file: UploadFile) -> list:
    """Read an uploaded CSV/Excel file into row mappings, or fail with 400."""
    content = await file.read()
    try:
        return read_rows(content, file.filename or "")
    except FileReadError as exc:
        logger.warning("Rejected upload %s: %s", file.filename, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post(
    "/orders",
    response_model=ImportResult,
    summary="Upload orders (replaces every stored order)",
)
async def upload_orders(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    rows = await read_upload(file)
    logger.info("Order upload %s: %d rows parsed", file.filename, len(rows))

    try:
        return import_orders(db, rows)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except Exception as e:
        logger.error("Error while importing orders from %s: %s", file.filename, e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to upload orders: {e}",
        )


@router.post(
    "/shipping-costs",
    response_model=ImportResult,
    summary="Upload shipping costs (replaces every stored row)",
)
async def upload_shipping_costs(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    rows = await read_upload(file)

    try:
        return import_shipping_costs(db, rows)
    except Exception as e:
        logger.error("Error while importing shipping costs from %s: %s", file.filename, e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to upload shipping costs: {e}",
        )
