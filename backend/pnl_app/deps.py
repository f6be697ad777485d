from typing import Generator

from sqlalchemy.orm import Session

from pnl_app.core.database import open_session


def get_db() -> Generator[Session, None, None]:
    """One pooled session per request, released on every exit path."""
    db = open_session()
    try:
        yield db
    finally:
        db.close()
