"""Shared status label helpers for the customer app and staff console."""
from __future__ import annotations

from resto.domain.value_objects import OrderStatus

_LABELS: dict[str, dict[OrderStatus, str]] = {
    "ms": {
        OrderStatus.PENDING: "Menunggu",
        OrderStatus.CONFIRMED: "Disahkan",
        OrderStatus.PREPARING: "Menyediakan",
        OrderStatus.READY: "Siap",
        OrderStatus.DELIVERED: "Dihantar",
        OrderStatus.CANCELLED: "Dibatalkan",
    },
    "en": {
        OrderStatus.PENDING: "Pending",
        OrderStatus.CONFIRMED: "Confirmed",
        OrderStatus.PREPARING: "Preparing",
        OrderStatus.READY: "Ready",
        OrderStatus.DELIVERED: "Delivered",
        OrderStatus.CANCELLED: "Cancelled",
    },
}

STATUS_COLORS: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "#FF9500",
    OrderStatus.CONFIRMED: "#007AFF",
    OrderStatus.PREPARING: "#5856D6",
    OrderStatus.READY: "#30D158",
    OrderStatus.DELIVERED: "#34C759",
    OrderStatus.CANCELLED: "#FF3B30",
}


def status_label(status: str | OrderStatus | None, lang: str = "ms") -> str:
    """Return localized label for an order status."""
    if not status:
        status = OrderStatus.PENDING
    try:
        normalized = OrderStatus.parse(status)
    except ValueError:
        return str(status)
    table = _LABELS.get(lang, _LABELS["ms"])
    return table[normalized]


def status_color(status: str | OrderStatus | None) -> str:
    try:
        return STATUS_COLORS[OrderStatus.parse(status or OrderStatus.PENDING)]
    except ValueError:
        return "#666666"
