import base64
import logging

from celery import shared_task

from pnl_app.core.celery_app import celery_app  # noqa: F401  registers the app for shared tasks
from pnl_app.core.database import open_session
from pnl_app.services.order_import_service import import_orders
from pnl_app.utils.file_reader import read_rows

logger = logging.getLogger(__name__)


@shared_task(name="pnl_app.worker.tasks.orders_import")
def orders_import(content_b64: str, filename: str) -> dict:
    """
    Import an uploaded order file outside the request cycle.

    The file travels base64 encoded since the broker only carries JSON.
    """
    rows = read_rows(base64.b64decode(content_b64), filename)
    db = open_session()
    try:
        result = import_orders(db, rows)
    finally:
        db.close()
    logger.info("Background order import of %s finished: %s", filename, result["message"])
    return result
