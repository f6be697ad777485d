from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from pnl_app.core.config import settings
from pnl_app.deps import get_db

router = APIRouter()


@router.get("/health", summary="Liveness and database check")
def health(db: Session = Depends(get_db)) -> dict:
    db.execute(text("SELECT 1"))
    return {"status": "ok", "environment": settings.ENVIRONMENT, "database": "ok"}
