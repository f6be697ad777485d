"""Background order import and logging setup."""

import base64
from unittest.mock import MagicMock

from pnl_app.core.logging import build_logging_config
from pnl_app.models import Order
from pnl_app.worker import tasks

CSV = b"Order Date,Product Name,Order Amount\n2024-02-01,P1,100\n2024-02-02,P2,200\n"


def test_orders_import_task_runs_importer(db, monkeypatch):
    monkeypatch.setattr(tasks, "open_session", lambda: db)

    result = tasks.orders_import(base64.b64encode(CSV).decode("ascii"), "orders.csv")

    assert result["count"] == 2
    assert db.query(Order).count() == 2


def test_queue_route_hands_file_to_worker(client, monkeypatch):
    fake = MagicMock()
    fake.delay.return_value.id = "task-1"
    monkeypatch.setattr("pnl_app.api.v1.job_routes.orders_import", fake)

    response = client.post("/api/v1/jobs/orders-import", files={"file": ("orders.csv", CSV, "text/csv")})

    assert response.status_code == 202
    assert response.json() == {"status": "queued", "task_id": "task-1"}
    encoded, filename = fake.delay.call_args.args
    assert base64.b64decode(encoded) == CSV
    assert filename == "orders.csv"


def test_logging_config_quiets_sql_echo():
    config = build_logging_config("debug")

    assert config["root"]["level"] == "DEBUG"
    assert config["loggers"]["pnl_app"]["level"] == "DEBUG"
    assert config["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"
