# pnl_app/api/v1/price_entry_routes.py

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from pnl_app.api.v1.upload_routes import read_upload
from pnl_app.core.config import settings
from pnl_app.deps import get_db
from pnl_app.schemas.pricing import BulkImportResult, MissingPriceOut, PriceEntryIn, PriceEntryOut
from pnl_app.services.missing_price_service import MissingPriceOptions, find_missing
from pnl_app.services.price_entry_service import (
    build_template_csv,
    create_or_update_entry,
    delete_all_entries,
    delete_entry,
    entry_to_dict,
    export_entries_csv,
    get_entry,
    import_price_rows,
    list_entries,
    replace_entry,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _csv_response(body: str, filename: str) -> Response:
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("", response_model=List[PriceEntryOut], summary="List price entries")
def list_price_entries(
    supplier: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    return list_entries(db, supplier=supplier)


@router.post(
    "",
    response_model=PriceEntryOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create or update the price entry of a supplier/product",
)
def create_price_entry(payload: PriceEntryIn, db: Session = Depends(get_db)):
    try:
        entry = create_or_update_entry(db, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return entry_to_dict(entry, entry.supplier.name if entry.supplier else "")


@router.delete("", summary="Delete every price entry and supplier")
def delete_all_price_entries(db: Session = Depends(get_db)):
    try:
        result = delete_all_entries(db)
    except Exception as e:
        logger.error("Failed to delete price entries: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete price entries: {e}",
        )
    return {
        "message": f"Deleted {result['deleted_prices']} price entries and {result['deleted_suppliers']} suppliers",
        **result,
    }


@router.post("/bulk-import", response_model=BulkImportResult, summary="Upload a price list")
async def bulk_import_price_entries(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    rows = await read_upload(file)
    try:
        return import_price_rows(db, rows)
    except Exception as e:
        logger.error("Price list import failed for %s: %s", file.filename, e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to import price entries: {e}",
        )


@router.get("/missing", response_model=List[MissingPriceOut], summary="Supplier/product pairs without a price")
def missing_price_entries(
    limit: int = Query(default=settings.MISSING_PRICE_LIMIT, ge=1, le=1000),
    check_validity: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    return find_missing(db, MissingPriceOptions(limit=limit, check_validity=check_validity))


@router.get("/export", summary="Download every price entry as CSV")
def export_price_entries(db: Session = Depends(get_db)):
    return _csv_response(export_entries_csv(db), f"product_database_{date.today().isoformat()}.csv")


@router.get("/template", summary="Download the price list template")
def price_entry_template(db: Session = Depends(get_db)):
    return _csv_response(build_template_csv(db), "price_list_template.csv")


@router.get("/{entry_id}", response_model=PriceEntryOut, summary="Get one price entry")
def get_price_entry(entry_id: int, db: Session = Depends(get_db)):
    try:
        entry = get_entry(db, entry_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return entry_to_dict(entry, entry.supplier.name if entry.supplier else "")


@router.put("/{entry_id}", response_model=PriceEntryOut, summary="Replace a price entry")
def replace_price_entry(entry_id: int, payload: PriceEntryIn, db: Session = Depends(get_db)):
    try:
        entry = replace_entry(db, entry_id, payload)
    except ValueError as exc:
        code = status.HTTP_404_NOT_FOUND if "not found" in str(exc) else status.HTTP_400_BAD_REQUEST
        raise HTTPException(status_code=code, detail=str(exc))
    return entry_to_dict(entry, entry.supplier.name if entry.supplier else "")


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a price entry")
def delete_price_entry(entry_id: int, db: Session = Depends(get_db)):
    try:
        delete_entry(db, entry_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return None
