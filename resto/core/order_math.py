"""Order pricing: subtotal, flat delivery fee, tax and grand total.

Pure and deterministic so the checkout preview and the authoritative value
written at order creation come out identical.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol

from resto.core.constants import CURRENCY, DELIVERY_FEE, MONEY_QUANT, TAX_RATE


class PricedLine(Protocol):
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True, slots=True)
class OrderSummary:
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    total: Decimal


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Round to cents, half up."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    return f"{CURRENCY}{to_money(value):.2f}"


def calc_items_total(items: Iterable[PricedLine]) -> Decimal:
    return to_money(sum((Decimal(item.unit_price) * item.quantity for item in items), Decimal(0)))


def calc_quantity(items: Iterable[PricedLine]) -> int:
    return sum(item.quantity for item in items)


def calc_tax(subtotal: Decimal) -> Decimal:
    """Tax applies to food only, never to the delivery fee."""
    return to_money(subtotal * TAX_RATE)


def compute_summary(items: Iterable[PricedLine]) -> OrderSummary:
    subtotal = calc_items_total(items)
    tax = calc_tax(subtotal)
    return OrderSummary(
        subtotal=subtotal,
        delivery_fee=DELIVERY_FEE,
        tax=tax,
        total=subtotal + DELIVERY_FEE + tax,
    )
