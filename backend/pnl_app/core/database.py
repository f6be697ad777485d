import logging
import time
from typing import Callable, List, Set

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from pnl_app.core.config import settings

logger = logging.getLogger(__name__)


class DatabaseUnavailable(RuntimeError):
    """Raised when no connection could be acquired after all retries."""


def build_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(url, future=True)
    return create_engine(
        url,
        future=True,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
    )


# SQLAlchemy engine
engine = build_engine(settings.DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
)


def open_session(
    factory: Callable[[], Session] = SessionLocal,
    retries: int | None = None,
    backoff: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Session:
    """
    Open a session and make sure it holds a live connection.

    Retries with exponential backoff (backoff, 2*backoff, 4*backoff ...) when
    the pool is exhausted or the server refuses the connection.
    """
    retries = settings.DB_CONNECT_RETRIES if retries is None else retries
    backoff = settings.DB_RETRY_BACKOFF_SECONDS if backoff is None else backoff

    last_exc: Exception | None = None
    for attempt in range(max(retries, 1)):
        db = factory()
        try:
            db.execute(text("SELECT 1"))
            return db
        except (OperationalError, PoolTimeoutError) as exc:
            db.close()
            last_exc = exc
            logger.warning("Connection attempt %d/%d failed: %s", attempt + 1, retries, exc)
            if attempt < retries - 1:
                sleep(backoff * (2 ** attempt))

    raise DatabaseUnavailable(f"Unable to acquire a database connection after {retries} attempts") from last_exc


def available_tables(db: Session) -> Set[str]:
    """Names of the tables that currently exist in the bound database."""
    return set(inspect(db.connection()).get_table_names())


def table_columns(db: Session, table_name: str) -> List[str]:
    """Column names of `table_name`, or [] when the table does not exist."""
    inspector = inspect(db.connection())
    if not inspector.has_table(table_name):
        return []
    return [col["name"] for col in inspector.get_columns(table_name)]
