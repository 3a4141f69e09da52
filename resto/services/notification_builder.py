"""
Notification Builder - message templates for order events.

Each event maps to a fixed title/message pair per language; payloads always
carry ``orderId`` and ``eventType`` so taps can be routed back into the app.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from resto.core.notifications import NotificationType
from resto.core.order_math import format_money
from resto.domain.entities import Order
from resto.domain.value_objects import OrderStatus

STATUS_MESSAGES: dict[str, dict[OrderStatus, str]] = {
    "ms": {
        OrderStatus.PENDING: "Pesanan anda telah diterima dan sedang diproses",
        OrderStatus.CONFIRMED: "Pesanan anda telah disahkan oleh restoran",
        OrderStatus.PREPARING: "Pesanan anda sedang disediakan",
        OrderStatus.READY: "Pesanan anda sudah siap! Sila ambil pesanan anda",
        OrderStatus.DELIVERED: "Pesanan anda telah dihantar. Terima kasih!",
        OrderStatus.CANCELLED: "Pesanan anda telah dibatalkan",
    },
    "en": {
        OrderStatus.PENDING: "Your order has been received and is being processed",
        OrderStatus.CONFIRMED: "Your order has been confirmed by the restaurant",
        OrderStatus.PREPARING: "Your order is being prepared",
        OrderStatus.READY: "Your order is ready!",
        OrderStatus.DELIVERED: "Your order has been delivered. Thank you!",
        OrderStatus.CANCELLED: "Your order has been cancelled",
    },
}


@dataclass(frozen=True, slots=True)
class NotificationContent:
    type: NotificationType
    title: str
    message: str
    data: dict[str, Any]


class NotificationTemplates:
    """Builds user-facing content for lifecycle and payment events."""

    def __init__(self, lang: str = "ms"):
        self.lang = lang if lang in STATUS_MESSAGES else "ms"

    def _ms(self) -> bool:
        return self.lang == "ms"

    @staticmethod
    def _payload(order: Order, event_type: NotificationType, **extra: Any) -> dict[str, Any]:
        return {"orderId": order.id, "eventType": event_type.value, **extra}

    def status_changed(self, order: Order, new_status: OrderStatus) -> NotificationContent:
        title = f"Pesanan #{order.short_code}" if self._ms() else f"Order #{order.short_code}"
        return NotificationContent(
            type=NotificationType.ORDER_STATUS,
            title=title,
            message=STATUS_MESSAGES[self.lang][new_status],
            data=self._payload(order, NotificationType.ORDER_STATUS, status=new_status.value),
        )

    def payment_confirmed(self, order: Order) -> NotificationContent:
        if self._ms():
            title = "Pembayaran Disahkan"
            message = f"Pembayaran untuk pesanan #{order.short_code} telah disahkan"
        else:
            title = "Payment Confirmed"
            message = f"Payment for order #{order.short_code} has been confirmed"
        return NotificationContent(
            type=NotificationType.PAYMENT_CONFIRMED,
            title=title,
            message=message,
            data=self._payload(order, NotificationType.PAYMENT_CONFIRMED),
        )

    def staff_new_order(self, order: Order) -> NotificationContent:
        total = format_money(order.grand_total)
        if self._ms():
            customer = order.customer_name or "Pelanggan Berdaftar"
            title = "Pesanan Baru Diterima"
            message = f"Pesanan baru dari {customer} - {total}"
        else:
            customer = order.customer_name or "Registered customer"
            title = "New Order Received"
            message = f"New order from {customer} - {total}"
        return NotificationContent(
            type=NotificationType.NEW_ORDER,
            title=title,
            message=message,
            data=self._payload(order, NotificationType.NEW_ORDER),
        )

    def customer_order_created(self, order: Order) -> NotificationContent:
        total = format_money(order.grand_total)
        if self._ms():
            title = "Pesanan Berjaya Dibuat"
            message = f"Anda telah berjaya membuat pesanan - {total}"
        else:
            title = "Order Placed"
            message = f"Your order has been placed - {total}"
        return NotificationContent(
            type=NotificationType.ORDER_STATUS,
            title=title,
            message=message,
            data=self._payload(order, NotificationType.ORDER_STATUS, status=order.status.value),
        )
