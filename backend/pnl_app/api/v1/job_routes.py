import base64
import logging

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from pnl_app.utils.file_reader import ALLOWED_EXTENSIONS
from pnl_app.worker.tasks import orders_import

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/orders-import",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Queue an order upload for background import",
)
async def queue_orders_import(file: UploadFile = File(...)):
    filename = file.filename or ""
    if not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only Excel/CSV files are allowed.")
    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty.")

    result = orders_import.delay(base64.b64encode(content).decode("ascii"), filename)
    logger.info("Queued order import %s as task %s", filename, result.id)
    return {"status": "queued", "task_id": result.id}
