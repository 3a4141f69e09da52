from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from resto.domain.entities import Order
from resto.domain.value_objects import OrderStatus, PaymentMethod


@dataclass
class SalesTotals:
    today: Decimal = Decimal(0)
    this_week: Decimal = Decimal(0)
    this_month: Decimal = Decimal(0)
    all_time: Decimal = Decimal(0)


@dataclass
class TopSellingItem:
    food_name: str
    quantity: int
    revenue: Decimal


@dataclass
class PaymentBreakdown:
    qr_code: int = 0
    cash_on_delivery: int = 0


@dataclass
class RevenueBreakdown:
    subtotal: Decimal = Decimal(0)
    delivery_fees: Decimal = Decimal(0)
    taxes: Decimal = Decimal(0)


@dataclass
class BusinessReport:
    generated_at: datetime
    total_orders: int
    sales: SalesTotals
    status_counts: Dict[str, int] = field(default_factory=dict)
    top_items: List[TopSellingItem] = field(default_factory=list)
    payments: PaymentBreakdown = field(default_factory=PaymentBreakdown)
    revenue: RevenueBreakdown = field(default_factory=RevenueBreakdown)


def _local(value: datetime, tz) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)


def completed_orders(orders: Iterable[Order]) -> List[Order]:
    """Delivered orders whose payment is confirmed; the only ones counted as sales."""
    return [o for o in orders if o.status == OrderStatus.DELIVERED and o.payment_confirmed]


def get_sales_totals(orders: Iterable[Order], now: datetime) -> SalesTotals:
    """
    Sum grand totals of completed orders by period.

    Args:
        orders: Orders to aggregate.
        now: Reference time; its timezone defines day boundaries.

    Returns:
        SalesTotals for today, this week (from Sunday), this month and all time.
    """
    tz = now.tzinfo or timezone.utc
    today = now.astimezone(tz).replace(hour=0, minute=0, second=0, microsecond=0)
    # isoweekday: Monday=1 .. Sunday=7
    week_start = today - timedelta(days=today.isoweekday() % 7)
    month_start = today.replace(day=1)

    totals = SalesTotals()
    for order in completed_orders(orders):
        created = _local(order.created_at, tz)
        totals.all_time += order.grand_total
        if created >= month_start:
            totals.this_month += order.grand_total
        if created >= week_start:
            totals.this_week += order.grand_total
        if today <= created < today + timedelta(days=1):
            totals.today += order.grand_total
    return totals


def get_status_counts(orders: Iterable[Order]) -> Dict[str, int]:
    counts = {status.value: 0 for status in OrderStatus}
    for order in orders:
        counts[order.status.value] += 1
    return counts


def get_top_selling_items(orders: Iterable[Order], limit: int = 10) -> List[TopSellingItem]:
    """Rank foods by quantity sold, cancelled orders excluded."""
    by_name: Dict[str, TopSellingItem] = {}
    for order in orders:
        if order.status == OrderStatus.CANCELLED:
            continue
        for item in order.items:
            entry = by_name.setdefault(
                item.food_name, TopSellingItem(item.food_name, 0, Decimal(0))
            )
            entry.quantity += item.quantity
            entry.revenue += item.line_total
    ranked = sorted(by_name.values(), key=lambda entry: entry.quantity, reverse=True)
    return ranked[:limit]


def get_payment_breakdown(orders: Iterable[Order]) -> PaymentBreakdown:
    breakdown = PaymentBreakdown()
    for order in orders:
        if order.payment_method == PaymentMethod.QR_CODE:
            breakdown.qr_code += 1
        elif order.payment_method == PaymentMethod.CASH_ON_DELIVERY:
            breakdown.cash_on_delivery += 1
    return breakdown


def get_revenue_breakdown(orders: Iterable[Order]) -> RevenueBreakdown:
    breakdown = RevenueBreakdown()
    for order in completed_orders(orders):
        breakdown.subtotal += order.subtotal
        breakdown.delivery_fees += order.delivery_fee
        breakdown.taxes += order.tax
    return breakdown


def build_business_report(
    orders: Iterable[Order], now: Optional[datetime] = None, top_limit: int = 10
) -> BusinessReport:
    orders = list(orders)
    now = now or datetime.now(timezone.utc)
    return BusinessReport(
        generated_at=now,
        total_orders=len(orders),
        sales=get_sales_totals(orders, now),
        status_counts=get_status_counts(orders),
        top_items=get_top_selling_items(orders, top_limit),
        payments=get_payment_breakdown(orders),
        revenue=get_revenue_breakdown(orders),
    )
