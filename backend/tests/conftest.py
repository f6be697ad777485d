"""
Pytest fixtures: an in-memory SQLite database per test, a session bound to
it and a FastAPI TestClient whose get_db dependency uses that session.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pnl_app.deps import get_db
from pnl_app.main import create_app
from pnl_app.models import Base, MarketingSpend, Order, PriceEntry, ShippingCost, Supplier, classify_status


def _sqlite_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    # Let SQLAlchemy drive BEGIN so SAVEPOINTs behave like they do on Postgres
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest.fixture
def engine():
    engine = _sqlite_engine()
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def empty_engine():
    """A database where no table has been created yet."""
    engine = _sqlite_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autoflush=False, future=True)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def empty_db(empty_engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=empty_engine, autoflush=False, future=True)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# DATA HELPERS
# =============================================================================

def add_order(
    db: Session,
    order_date: date,
    product_name: str = "P1",
    pickup_warehouse: str | None = "W1",
    order_amount: str = "1000",
    status: str = "delivered",
    **extra,
) -> Order:
    order = Order(
        order_date=order_date,
        product_name=product_name,
        pickup_warehouse=pickup_warehouse,
        order_amount=Decimal(order_amount),
        product_value=Decimal("0"),
        status=status,
        status_class=classify_status(status),
        channel=extra.pop("channel", "Shopify"),
        **extra,
    )
    db.add(order)
    db.commit()
    return order


def add_supplier(db: Session, name: str = "W1") -> Supplier:
    supplier = Supplier(name=name)
    db.add(supplier)
    db.commit()
    return supplier


def add_price(
    db: Session,
    supplier: Supplier,
    product_name: str = "P1",
    price_after_gst: str = "600",
    effective_from: date = date(2024, 1, 1),
    effective_to: date | None = None,
) -> PriceEntry:
    entry = PriceEntry(
        supplier_id=supplier.id,
        product_name=product_name,
        currency="INR",
        price_before_gst=Decimal("0"),
        gst_rate=Decimal("18"),
        price_after_gst=Decimal(price_after_gst),
        hsn_code="1234",
        effective_from=effective_from,
        effective_to=effective_to,
        supplier_product_id=f"{supplier.name}{product_name}",
    )
    db.add(entry)
    db.commit()
    return entry


def add_shipping(db: Session, region: str, cost: str) -> ShippingCost:
    row = ShippingCost(region=region, weight_range="", shipping_cost=Decimal(cost))
    db.add(row)
    db.commit()
    return row


def add_marketing(db: Session, spend_date: date, amount: str, channel: str = "Meta") -> MarketingSpend:
    row = MarketingSpend(spend_date=spend_date, amount=Decimal(amount), channel=channel)
    db.add(row)
    db.commit()
    return row
