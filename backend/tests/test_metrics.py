"""Dashboard metrics: priced revenue/cost, period comparison and breakdowns."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from conftest import add_marketing, add_order, add_price, add_shipping, add_supplier

from pnl_app.services.metrics_service import compute_metrics, percent_change, previous_period


@pytest.fixture
def priced_w1(db):
    supplier = add_supplier(db, "W1")
    add_price(db, supplier, product_name="P1", price_after_gst="600")
    return supplier


def test_previous_period_has_same_length_and_ends_day_before():
    prev_start, prev_end = previous_period(date(2024, 2, 1), date(2024, 2, 28))

    assert prev_end == date(2024, 1, 31)
    assert (prev_end - prev_start) == (date(2024, 2, 28) - date(2024, 2, 1))
    assert prev_start == date(2024, 1, 4)


@pytest.mark.parametrize(
    "current, previous, expected",
    [
        (150, 100, 50.0),
        (50, 100, -50.0),
        (10, 0, 100.0),
        (0, 0, 0.0),
        (-5, 0, 0.0),
    ],
)
def test_percent_change(current, previous, expected):
    assert percent_change(current, previous) == pytest.approx(expected)


def test_priced_order_yields_revenue_cost_and_profit(db, priced_w1):
    add_order(db, date(2024, 2, 1), order_amount="1000")

    report = compute_metrics(db, date(2024, 2, 1), date(2024, 2, 28))

    assert report.current.revenue == Decimal("1000")
    assert report.current.product_cost == Decimal("600")
    assert report.current.net_profit == Decimal("400")
    assert report.current.profit_margin == pytest.approx(40.0)
    assert report.current.order_count == 1
    assert report.changes.revenue == 100.0


def test_order_matching_two_entries_counts_once_and_warns(db, caplog):
    supplier = add_supplier(db, "W1")
    add_price(db, supplier, product_name="P1", price_after_gst="600")
    add_price(db, supplier, product_name="P1 ", price_after_gst="600")
    add_order(db, date(2024, 2, 1), order_amount="1000")

    with caplog.at_level(logging.WARNING, logger="pnl_app.services.metrics_service"):
        report = compute_metrics(db, date(2024, 2, 1), date(2024, 2, 28))

    assert report.current.order_count == 1
    assert "matched more than one effective price entry" in caplog.text
    assert "1 orders between 2024-02-01 and 2024-02-28" in caplog.text


def test_cancelled_order_is_excluded_everywhere(db, priced_w1):
    add_order(db, date(2024, 2, 1), status="Cancelled by customer")

    report = compute_metrics(db, date(2024, 2, 1), date(2024, 2, 28))

    assert report.current.revenue == 0
    assert report.current.product_cost == 0
    assert report.channel_breakdown == []
    assert report.product_performance == []
    assert report.order_modes.shipped_orders == 0


def test_order_after_price_expiry_is_not_priced(db):
    supplier = add_supplier(db, "W1")
    add_price(db, supplier, effective_from=date(2024, 1, 1), effective_to=date(2024, 1, 31))
    add_order(db, date(2024, 2, 1), mode="COD")

    report = compute_metrics(db, date(2024, 2, 1), date(2024, 2, 28))

    assert report.current.revenue == 0
    assert report.current.order_count == 0
    # mode counts do not need a price match
    assert report.order_modes.cod_orders == 1
    assert report.order_modes.shipped_orders == 1


def test_shipping_and_marketing_reduce_profit(db, priced_w1):
    add_order(db, date(2024, 2, 1), order_amount="1000", fulfilled_by="Delhivery")
    add_shipping(db, " Delhivery ", "50")
    add_marketing(db, date(2024, 2, 10), "100")
    add_marketing(db, date(2024, 3, 10), "999")

    report = compute_metrics(db, date(2024, 2, 1), date(2024, 2, 28))

    assert report.current.shipping_costs == Decimal("50")
    assert report.current.marketing_spend == Decimal("100")
    assert report.current.net_profit == Decimal("250")


def test_previous_period_comparison(db, priced_w1):
    add_order(db, date(2024, 1, 20), order_amount="500")
    add_order(db, date(2024, 2, 10), order_amount="1000")

    report = compute_metrics(db, date(2024, 2, 1), date(2024, 2, 28))

    assert report.previous.revenue == Decimal("500")
    assert report.changes.revenue == pytest.approx(100.0)
    # previous profit is 500 - 600 = -100
    assert report.changes.net_profit == pytest.approx(-500.0)


def test_show_all_skips_comparison(db, priced_w1):
    add_order(db, date(2024, 1, 20), order_amount="500")
    add_order(db, date(2024, 2, 10), order_amount="1000")

    report = compute_metrics(db, today=date(2024, 6, 1))

    assert report.show_all is True
    assert report.start_date == date(2000, 1, 1)
    assert report.end_date == date(2024, 6, 1)
    assert report.current.revenue == Decimal("1500")
    assert report.previous.revenue == 0
    assert report.changes.revenue == 0
    assert report.changes.net_profit == 0


def test_store_filter_limits_orders(db, priced_w1):
    w2 = add_supplier(db, "W2")
    add_price(db, w2, product_name="P1", price_after_gst="100")
    add_order(db, date(2024, 2, 1), order_amount="1000", pickup_warehouse="W1")
    add_order(db, date(2024, 2, 1), order_amount="300", pickup_warehouse="W2")

    report = compute_metrics(db, date(2024, 2, 1), date(2024, 2, 28), stores=["W2"])

    assert report.current.revenue == Decimal("300")
    assert report.current.product_cost == Decimal("100")


def test_trends_merge_every_source_per_day(db, priced_w1):
    add_order(db, date(2024, 2, 1), order_amount="1000", fulfilled_by="Delhivery")
    add_shipping(db, "Delhivery", "50")
    add_marketing(db, date(2024, 2, 3), "100")

    report = compute_metrics(db, date(2024, 2, 1), date(2024, 2, 28))

    assert [(p.date, p.revenue, p.shipping_costs, p.marketing_spend, p.profit) for p in report.trends] == [
        (date(2024, 2, 1), Decimal("1000"), Decimal("50"), Decimal("0"), Decimal("350")),
        (date(2024, 2, 3), Decimal("0"), Decimal("0"), Decimal("100"), Decimal("-100")),
    ]


def test_channel_and_product_breakdowns(db, priced_w1):
    add_price(db, priced_w1, product_name="P2", price_after_gst="10")
    add_order(db, date(2024, 2, 1), product_name="P1", order_amount="1000", channel="Shopify")
    add_order(db, date(2024, 2, 2), product_name="P2", order_amount="200", channel="Amazon")
    add_order(db, date(2024, 2, 3), product_name="P2", order_amount="300", channel="Amazon")
    add_order(db, date(2024, 2, 3), product_name="P9", order_amount="5000", channel="Amazon")

    report = compute_metrics(db, date(2024, 2, 1), date(2024, 2, 28))

    channels = {c.channel: (c.order_count, c.revenue) for c in report.channel_breakdown}
    assert channels == {"Shopify": (1, Decimal("1000")), "Amazon": (2, Decimal("500"))}
    assert [p.product_name for p in report.product_performance] == ["P1", "P2"]
    assert report.product_performance[1].product_cost == Decimal("20")


def test_mode_amounts(db):
    add_order(db, date(2024, 2, 1), order_amount="100", mode="cod")
    add_order(db, date(2024, 2, 1), order_amount="250", mode="PPD")
    add_order(db, date(2024, 2, 1), order_amount="70", mode=None)

    modes = compute_metrics(db, date(2024, 2, 1), date(2024, 2, 28)).order_modes

    assert (modes.cod_orders, modes.ppd_orders, modes.shipped_orders) == (1, 1, 3)
    assert modes.cod_amount == Decimal("100")
    assert modes.ppd_amount == Decimal("250")


def test_start_after_end_is_rejected(db):
    with pytest.raises(ValueError):
        compute_metrics(db, date(2024, 3, 1), date(2024, 2, 1))


def test_absent_tables_degrade_to_zero(empty_db):
    report = compute_metrics(empty_db, date(2024, 2, 1), date(2024, 2, 28))

    assert report.current.revenue == 0
    assert report.trends == []
    assert report.order_modes.shipped_orders == 0
