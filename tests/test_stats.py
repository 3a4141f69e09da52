from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from resto.domain.entities import DeliveryAddress, Order, OrderLine
from resto.domain.value_objects import OrderStatus, PaymentMethod
from resto.services.stats import (
    build_business_report,
    get_payment_breakdown,
    get_revenue_breakdown,
    get_sales_totals,
    get_status_counts,
    get_top_selling_items,
)

# Wednesday
NOW = datetime(2024, 5, 15, 15, 0, tzinfo=timezone.utc)


def _order(
    *,
    created_at: datetime,
    status: OrderStatus = OrderStatus.DELIVERED,
    payment_confirmed: bool = True,
    payment_method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY,
    items: list[tuple[str, int, str]] | None = None,
) -> Order:
    lines = [
        OrderLine(food_id=name, food_name=name, quantity=qty, unit_price=Decimal(price))
        for name, qty, price in (items or [("Nasi Lemak", 1, "10.00")])
    ]
    subtotal = sum((line.line_total for line in lines), Decimal(0))
    tax = (subtotal * Decimal("0.08")).quantize(Decimal("0.01"))
    return Order(
        user_id="user-1",
        items=lines,
        subtotal=subtotal,
        delivery_fee=Decimal("2.99"),
        tax=tax,
        grand_total=subtotal + Decimal("2.99") + tax,
        delivery_address=DeliveryAddress(),
        contact_number="012",
        payment_method=payment_method,
        status=status,
        payment_confirmed=payment_confirmed,
        created_at=created_at,
        updated_at=created_at,
    )


def test_sales_totals_by_period() -> None:
    orders = [
        _order(created_at=NOW - timedelta(hours=2)),  # today
        _order(created_at=NOW - timedelta(days=2)),  # Monday, this week
        _order(created_at=NOW - timedelta(days=10)),  # earlier this month
        _order(created_at=NOW - timedelta(days=40)),  # last month
    ]

    totals = get_sales_totals(orders, NOW)

    each = Decimal("13.79")
    assert totals.today == each
    assert totals.this_week == each * 2
    assert totals.this_month == each * 3
    assert totals.all_time == each * 4


def test_week_starts_on_sunday() -> None:
    sunday = _order(created_at=datetime(2024, 5, 12, 9, 0, tzinfo=timezone.utc))
    saturday = _order(created_at=datetime(2024, 5, 11, 9, 0, tzinfo=timezone.utc))

    totals = get_sales_totals([sunday, saturday], NOW)

    assert totals.this_week == sunday.grand_total


def test_only_delivered_and_paid_orders_count_as_sales() -> None:
    orders = [
        _order(created_at=NOW, status=OrderStatus.READY),
        _order(created_at=NOW, payment_confirmed=False, payment_method=PaymentMethod.QR_CODE),
        _order(created_at=NOW, status=OrderStatus.CANCELLED),
    ]

    assert get_sales_totals(orders, NOW).all_time == Decimal(0)
    assert get_revenue_breakdown(orders).subtotal == Decimal(0)


def test_status_counts_cover_every_status() -> None:
    orders = [
        _order(created_at=NOW, status=OrderStatus.PENDING),
        _order(created_at=NOW, status=OrderStatus.PENDING),
        _order(created_at=NOW, status=OrderStatus.CANCELLED),
    ]

    counts = get_status_counts(orders)

    assert counts["pending"] == 2
    assert counts["cancelled"] == 1
    assert counts["delivered"] == 0
    assert set(counts) == {s.value for s in OrderStatus}


def test_top_items_exclude_cancelled_orders() -> None:
    orders = [
        _order(created_at=NOW, items=[("Nasi Lemak", 2, "12.99"), ("Teh Tarik", 1, "3.50")]),
        _order(created_at=NOW, status=OrderStatus.PENDING, items=[("Teh Tarik", 4, "3.50")]),
        _order(created_at=NOW, status=OrderStatus.CANCELLED, items=[("Roti Canai", 10, "2.00")]),
    ]

    top = get_top_selling_items(orders)

    assert [(t.food_name, t.quantity) for t in top] == [("Teh Tarik", 5), ("Nasi Lemak", 2)]
    assert top[0].revenue == Decimal("17.50")
    assert len(get_top_selling_items(orders, limit=1)) == 1


def test_payment_and_revenue_breakdown() -> None:
    orders = [
        _order(created_at=NOW, payment_method=PaymentMethod.QR_CODE),
        _order(created_at=NOW),
        _order(created_at=NOW, status=OrderStatus.PENDING),
    ]

    payments = get_payment_breakdown(orders)
    revenue = get_revenue_breakdown(orders)

    assert (payments.qr_code, payments.cash_on_delivery) == (1, 2)
    assert revenue.subtotal == Decimal("20.00")
    assert revenue.delivery_fees == Decimal("5.98")
    assert revenue.taxes == Decimal("1.60")


def test_business_report_bundle() -> None:
    report = build_business_report([_order(created_at=NOW)], now=NOW)

    assert report.total_orders == 1
    assert report.generated_at == NOW
    assert report.sales.today == Decimal("13.79")
    assert report.top_items[0].food_name == "Nasi Lemak"
