"""
Notification Dispatcher - turns order events into user-facing alerts.

Delivery is best effort: every failure is logged and swallowed so the
state change that triggered it always stands.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Union

from resto.core.exceptions import NotificationDeliveryError
from resto.core.notifications import NavigationTarget, NotificationChannel, resolve_navigation
from resto.domain.entities import Order
from resto.domain.value_objects import OrderStatus
from resto.integrations.onesignal_push import OneSignalPushClient
from resto.services.notification_builder import NotificationContent, NotificationTemplates

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StatusChanged:
    order: Order
    new_status: OrderStatus


@dataclass(frozen=True, slots=True)
class PaymentConfirmed:
    order: Order


@dataclass(frozen=True, slots=True)
class NewOrder:
    order: Order


OrderEvent = Union[StatusChanged, PaymentConfirmed, NewOrder]
AdminIdsProvider = Callable[[], Awaitable[list[str]]]
Navigator = Callable[[NavigationTarget], None]


def _as_delivery_error(exc: Exception) -> NotificationDeliveryError:
    if isinstance(exc, NotificationDeliveryError):
        return exc
    return NotificationDeliveryError(f"{type(exc).__name__}: {exc}")


class NotificationDispatcher:
    """Maps order events to notifications and taps back to navigation.

    StatusChanged and PaymentConfirmed go to the customer; NewOrder alerts
    staff, and a signed-in customer also gets a receipt push.
    """

    def __init__(
        self,
        channel: NotificationChannel,
        templates: NotificationTemplates | None = None,
        *,
        push_client: OneSignalPushClient | None = None,
        admin_ids_provider: AdminIdsProvider | None = None,
        on_navigate: Navigator | None = None,
    ):
        self._channel = channel
        self._templates = templates or NotificationTemplates()
        self._push_client = push_client
        self._admin_ids_provider = admin_ids_provider
        self._on_navigate = on_navigate

    async def notify(self, event: OrderEvent) -> bool:
        """Deliver the alert for an event. Returns True if the local alert went out."""
        try:
            if isinstance(event, StatusChanged):
                content = self._templates.status_changed(event.order, event.new_status)
                delivered = await self._deliver_local(content)
                await self._push_to_customer(event.order, content)
            elif isinstance(event, PaymentConfirmed):
                content = self._templates.payment_confirmed(event.order)
                delivered = await self._deliver_local(content)
                await self._push_to_customer(event.order, content)
            elif isinstance(event, NewOrder):
                content = self._templates.staff_new_order(event.order)
                delivered = await self._deliver_local(content)
                await self._push_to_staff(content)
                await self._push_to_customer(
                    event.order, self._templates.customer_order_created(event.order)
                )
            else:
                logger.warning(f"Unknown notification event: {event!r}")
                return False
        except Exception as e:
            logger.error(f"Notification dispatch failed for {type(event).__name__}: {e}")
            return False
        return delivered

    async def _deliver_local(self, content: NotificationContent) -> bool:
        try:
            await self._channel.schedule_local(content.title, content.message, content.data)
        except Exception as e:
            error = _as_delivery_error(e)
            logger.error(
                f"Local notification failed (order={content.data.get('orderId')}): {error.message}"
            )
            return False
        return True

    async def _push(self, user_ids: list[str], content: NotificationContent) -> bool:
        if not self._push_client or not user_ids:
            return False
        try:
            await self._push_client.send(user_ids, content.title, content.message, content.data)
        except Exception as e:
            error = _as_delivery_error(e)
            logger.error(
                f"Push notification failed (order={content.data.get('orderId')}): {error.message}"
            )
            return False
        return True

    async def _push_to_customer(self, order: Order, content: NotificationContent) -> bool:
        if not order.user_id:
            return False
        return await self._push([order.user_id], content)

    async def _push_to_staff(self, content: NotificationContent) -> bool:
        if not self._push_client or not self._admin_ids_provider:
            return False
        try:
            admin_ids = await self._admin_ids_provider()
        except Exception as e:
            logger.error(f"Could not load staff recipients: {e}")
            return False
        return await self._push(admin_ids, content)

    # =========================================================================
    # TAP HANDLING
    # =========================================================================

    def on_user_action(self, payload: Any) -> NavigationTarget | None:
        """Resolve a tapped notification. Never raises."""
        try:
            return resolve_navigation(payload)
        except Exception as e:
            logger.error(f"Failed to resolve notification tap: {e}")
            return None

    def _handle_response(self, data: dict[str, Any]) -> None:
        target = self.on_user_action(data)
        if target is None or self._on_navigate is None:
            return
        try:
            self._on_navigate(target)
        except Exception as e:
            logger.error(f"Navigation to {target.path} failed: {e}")

    def attach(self) -> Callable[[], None]:
        """Listen for taps on the channel; returns the detach function."""
        return self._channel.add_response_listener(self._handle_response)
