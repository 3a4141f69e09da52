from __future__ import annotations

from decimal import Decimal

from resto.core.constants import DELIVERY_FEE, TAX_RATE
from resto.core.order_math import (
    calc_items_total,
    calc_quantity,
    calc_tax,
    compute_summary,
    format_money,
    to_money,
)
from resto.domain.entities import OrderLine


def _line(food_id: str, price: str, quantity: int) -> OrderLine:
    return OrderLine(food_id=food_id, food_name=food_id, quantity=quantity, unit_price=Decimal(price))


def test_example_cart_summary() -> None:
    items = [_line("a", "12.99", 2), _line("b", "8.99", 1)]

    summary = compute_summary(items)

    assert summary.subtotal == Decimal("34.97")
    assert summary.delivery_fee == Decimal("2.99")
    assert summary.tax == Decimal("2.80")
    assert summary.total == Decimal("40.76")


def test_total_is_sum_of_parts() -> None:
    items = [_line("a", "3.33", 3), _line("b", "0.10", 7), _line("c", "19.95", 1)]

    summary = compute_summary(items)

    assert summary.total == summary.subtotal + summary.delivery_fee + summary.tax


def test_tax_is_not_charged_on_delivery_fee() -> None:
    summary = compute_summary([_line("a", "10.00", 1)])

    assert summary.tax == Decimal("0.80")
    assert summary.tax == to_money(summary.subtotal * TAX_RATE)
    assert summary.delivery_fee == DELIVERY_FEE


def test_tax_rounds_half_up_to_cents() -> None:
    # 0.5625 -> 0.56, 0.5650 -> 0.57
    assert calc_tax(Decimal("7.03125")) == Decimal("0.56")
    assert calc_tax(Decimal("7.0625")) == Decimal("0.57")


def test_summary_is_deterministic() -> None:
    items = [_line("a", "12.99", 2), _line("b", "8.99", 1)]

    assert compute_summary(items) == compute_summary(list(items))


def test_helpers() -> None:
    items = [_line("a", "1.50", 2), _line("b", "2.25", 4)]

    assert calc_items_total(items) == Decimal("12.00")
    assert calc_quantity(items) == 6
    assert format_money(Decimal("40.76")) == "RM40.76"
    assert format_money(Decimal("3")) == "RM3.00"
