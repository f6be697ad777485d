import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from pnl_app.deps import get_db
from pnl_app.schemas.metrics import MetricsReport
from pnl_app.services.metrics_service import compute_metrics

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/metrics", response_model=MetricsReport, summary="Profit & loss dashboard metrics")
def dashboard_metrics(
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    stores: List[str] = Query(default=[], alias="stores[]"),
    show_all: Optional[bool] = Query(default=None),
    db: Session = Depends(get_db),
):
    """
    Without start_date and end_date the whole history is reported and the
    previous-period comparison is skipped.
    """
    try:
        return compute_metrics(db, start_date, end_date, stores=stores, show_all=show_all)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except Exception as e:
        logger.error("Dashboard metrics failed: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch metrics: {e}",
        )
