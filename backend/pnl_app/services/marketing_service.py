import logging
from datetime import date
from typing import Dict, List

from sqlalchemy.orm import Session

from pnl_app.core.database import available_tables
from pnl_app.models.marketing import MarketingSpend
from pnl_app.schemas.orders import MarketingSpendIn

logger = logging.getLogger(__name__)


def add_spend(db: Session, payload: MarketingSpendIn) -> MarketingSpend:
    if payload.amount is None or payload.amount <= 0:
        raise ValueError("amount must be greater than 0")

    spend = MarketingSpend(
        spend_date=payload.spend_date,
        amount=payload.amount,
        channel=(payload.channel or "").strip() or None,
        notes=payload.notes or None,
    )
    db.add(spend)
    db.commit()
    db.refresh(spend)
    logger.info("Added marketing spend %s on %s (id=%s)", spend.amount, spend.spend_date, spend.id)
    return spend


def list_spend(db: Session, start_date: date | None = None, end_date: date | None = None) -> List[MarketingSpend]:
    """Spend rows inside the optional window, newest first."""
    if "marketing_spend" not in available_tables(db):
        logger.warning("marketing_spend table not found; returning empty list")
        return []

    query = db.query(MarketingSpend)
    if start_date:
        query = query.filter(MarketingSpend.spend_date >= start_date)
    if end_date:
        query = query.filter(MarketingSpend.spend_date <= end_date)
    return query.order_by(MarketingSpend.spend_date.desc(), MarketingSpend.id.desc()).all()


def delete_spend(db: Session, spend_id: int) -> None:
    spend = db.get(MarketingSpend, spend_id)
    if spend is None:
        raise ValueError("Marketing spend not found")
    db.delete(spend)
    db.commit()


def delete_all_spend(db: Session) -> Dict[str, int]:
    if "marketing_spend" not in available_tables(db):
        return {"deleted": 0}
    try:
        deleted = db.query(MarketingSpend).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted all marketing spend (%d rows)", deleted)
    return {"deleted": deleted}
