from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from pnl_app.deps import get_db
from pnl_app.schemas.orders import DeleteResult, MarketingSpendIn, MarketingSpendOut
from pnl_app.services.marketing_service import add_spend, delete_all_spend, delete_spend, list_spend

router = APIRouter()


@router.post(
    "",
    response_model=MarketingSpendOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record marketing spend",
)
def add_spend_api(payload: MarketingSpendIn, db: Session = Depends(get_db)):
    try:
        return add_spend(db, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("", response_model=List[MarketingSpendOut], summary="List marketing spend")
def list_spend_api(
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
):
    return list_spend(db, start_date=start_date, end_date=end_date)


@router.delete("", response_model=DeleteResult, summary="Delete all marketing spend")
def delete_all_spend_api(db: Session = Depends(get_db)):
    return delete_all_spend(db)


@router.delete("/{spend_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete one spend row")
def delete_spend_api(spend_id: int, db: Session = Depends(get_db)):
    try:
        delete_spend(db, spend_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return None
