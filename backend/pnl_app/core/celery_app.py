from celery import Celery

from pnl_app.core.config import settings

celery_app = Celery(
    "pnl_worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["pnl_app.worker.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_default_queue="default",
    # Imports replace whole tables; a lost worker must not drop a half-acked job
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,
    task_time_limit=settings.IMPORT_TASK_TIME_LIMIT,
    result_expires=settings.IMPORT_RESULT_TTL,
    task_routes={
        "pnl_app.worker.tasks.orders_import": {"queue": "ingestion"},
    },
)
