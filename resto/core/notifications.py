"""
Notification model, local delivery channel and tap routing.

Supports:
- Immediate local alerts with a structured data payload
- Received-notification history (unread count, mark read, clear)
- Tap responses routed back to navigation targets
"""
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    """Types of notifications."""

    ORDER_STATUS = "order_status"
    PAYMENT_CONFIRMED = "payment_confirmed"
    NEW_ORDER = "new_order"
    GENERAL = "general"


@dataclass
class Notification:
    """Notification payload."""

    type: NotificationType
    title: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    read: bool = False

    @property
    def order_id(self) -> str | None:
        return self.data.get("orderId")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "data": self.data,
            "created_at": self.created_at.isoformat(),
            "read": self.read,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Notification":
        """Create from dictionary."""
        return cls(
            type=NotificationType(data["type"]),
            title=data["title"],
            message=data["message"],
            data=data.get("data", {}),
            created_at=datetime.fromisoformat(data["created_at"]),
            read=data.get("read", False),
        )


ResponseListener = Callable[[dict[str, Any]], None]


class NotificationChannel(Protocol):
    """Delivery channel: immediate local alerts plus tap callbacks."""

    async def schedule_local(self, title: str, body: str, data: dict[str, Any]) -> None:
        ...

    def add_response_listener(self, listener: ResponseListener) -> Callable[[], None]:
        ...


class LocalNotificationChannel:
    """In-process channel keeping the received history for the notification tray."""

    def __init__(self, history_limit: int = 100):
        self._history: list[Notification] = []
        self._history_limit = history_limit
        self._listeners: list[ResponseListener] = []

    async def schedule_local(self, title: str, body: str, data: dict[str, Any]) -> None:
        try:
            notification_type = NotificationType(data.get("eventType", NotificationType.GENERAL))
        except ValueError:
            notification_type = NotificationType.GENERAL
        notification = Notification(
            type=notification_type, title=title, message=body, data=dict(data)
        )
        self._history.insert(0, notification)
        del self._history[self._history_limit :]
        logger.debug(f"Local notification shown: {title}")

    def add_response_listener(self, listener: ResponseListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def tap(self, data: dict[str, Any]) -> None:
        """Deliver a tap on a shown notification to every listener."""
        for listener in list(self._listeners):
            try:
                listener(data)
            except Exception as e:
                logger.error(f"Notification response listener failed: {e}")

    @property
    def notifications(self) -> list[Notification]:
        return list(self._history)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._history if not n.read)

    def mark_as_read(self, order_id: str) -> None:
        for notification in self._history:
            if notification.order_id == order_id:
                notification.read = True

    def mark_all_as_read(self) -> None:
        for notification in self._history:
            notification.read = True

    def clear(self) -> None:
        self._history.clear()


# =============================================================================
# TAP ROUTING
# =============================================================================


@dataclass(frozen=True, slots=True)
class NavigationTarget:
    path: str
    params: dict[str, str] = field(default_factory=dict)


CUSTOMER_ORDERS_PATH = "/orders"
STAFF_ORDERS_PATH = "/admin/orders"
ORDER_DETAIL_PATH = "/order-confirmation"
QR_PAYMENT_PATH = "/qr-payment"
CART_PATH = "/cart"

DEEP_LINK_KEY = "deepLink"


def resolve_navigation(payload: Any) -> NavigationTarget | None:
    """Map a tapped notification payload to where the app should go.

    An embedded deep link wins; otherwise the event type decides. Anything
    malformed resolves to None.
    """
    if not isinstance(payload, Mapping):
        logger.warning(f"Ignoring notification tap with non-mapping payload: {payload!r}")
        return None

    if DEEP_LINK_KEY in payload:
        link = payload[DEEP_LINK_KEY]
        if isinstance(link, str) and link.startswith("/") and not link.startswith("//"):
            return NavigationTarget(path=link)
        logger.warning(f"Ignoring notification tap with invalid deep link: {link!r}")
        return None

    event_type = payload.get("eventType", payload.get("type"))
    order_id = payload.get("orderId")
    if not isinstance(order_id, str) or not order_id:
        logger.warning(f"Ignoring notification tap without orderId: {dict(payload)}")
        return None

    if event_type == NotificationType.ORDER_STATUS.value:
        return NavigationTarget(path=CUSTOMER_ORDERS_PATH)
    if event_type == NotificationType.NEW_ORDER.value:
        return NavigationTarget(path=STAFF_ORDERS_PATH)
    if event_type == NotificationType.PAYMENT_CONFIRMED.value:
        return NavigationTarget(path=ORDER_DETAIL_PATH, params={"orderId": order_id})

    logger.warning(f"Ignoring notification tap with unknown event type: {event_type!r}")
    return None
