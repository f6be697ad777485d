from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pnl_app.deps import get_db
from pnl_app.services.data_stats_service import collect_data_stats

router = APIRouter()


@router.get("", summary="Row counts and freshness of uploaded datasets")
def data_stats(db: Session = Depends(get_db)) -> dict:
    return collect_data_stats(db)
