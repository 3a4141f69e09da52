"""
Order Lifecycle Manager - the only writer of order status and payment flags.

Status Flow:
    PENDING     -> Waiting for staff confirmation
    CONFIRMED   -> Accepted by staff
    PREPARING   -> Kitchen is working on it
    READY       -> Waiting for the rider
    DELIVERED   -> Handed over (terminal)
    CANCELLED   -> Cancelled before preparation started (terminal)

Every accepted change writes the new value with a fresh updated_at and then
hands an event to the notification dispatcher. Notification problems never
undo a write.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from resto.core.constants import ORDERS_COLLECTION
from resto.core.exceptions import (
    IllegalTransitionError,
    OrderNotFoundException,
    RestoException,
    StoreUnavailableError,
)
from resto.core.order_math import compute_summary
from resto.core.realtime import orders_from_snapshot, sort_newest_first
from resto.domain.checkout import validate_order_request
from resto.domain.entities import CreateOrderRequest, Order
from resto.domain.order_fsm import validate_order_transition
from resto.domain.value_objects import OrderStatus, PaymentMethod
from resto.integrations.document_store import DocumentNotFoundError, DocumentStore, QuerySnapshot
from resto.services.notification_service import (
    NewOrder,
    NotificationDispatcher,
    OrderEvent,
    PaymentConfirmed,
    StatusChanged,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _next_timestamp(previous: datetime | None) -> datetime:
    """Current time, nudged forward if the clock has not moved past ``previous``."""
    now = _now()
    if previous is None:
        return now
    if previous.tzinfo is None:
        previous = previous.replace(tzinfo=timezone.utc)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def _status_value(status: Any) -> str:
    return getattr(status, "value", None) or str(status)


class OrderLifecycleManager:
    """Creates orders and moves them through the status table."""

    def __init__(
        self,
        store: DocumentStore,
        dispatcher: NotificationDispatcher | None = None,
        collection: str = ORDERS_COLLECTION,
    ):
        self._store = store
        self._dispatcher = dispatcher
        self._collection = collection

    # =========================================================================
    # STORE ACCESS
    # =========================================================================

    async def _guarded(self, action: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except (RestoException, DocumentNotFoundError):
            raise
        except Exception as e:
            logger.error(f"Store failure during {action}: {e}")
            raise StoreUnavailableError(f"Could not {action}: {e}") from e

    async def _write(self, order_id: str, fields: dict[str, Any]) -> None:
        try:
            await self._guarded(
                f"update order {order_id}",
                self._store.update(self._collection, order_id, fields),
            )
        except DocumentNotFoundError as e:
            raise OrderNotFoundException(order_id) from e

    async def _notify(self, event: OrderEvent) -> None:
        if self._dispatcher is None:
            return
        # The write has landed; let an in-flight send finish even if the caller goes away.
        try:
            await asyncio.shield(self._dispatcher.notify(event))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Notification for {type(event).__name__} failed: {e}")

    # =========================================================================
    # CREATE
    # =========================================================================

    async def create_order(self, request: CreateOrderRequest, user_id: str | None = None) -> Order:
        """
        Price the request and store it as a new pending order.

        Args:
            request: Checkout form contents
            user_id: Signed-in customer, or None for a guest order

        Returns:
            The stored order, id included

        Raises:
            ValidationError: Form incomplete; nothing was written
            StoreUnavailableError: Insert failed; no order exists
        """
        validate_order_request(request, user_id)

        summary = compute_summary(request.items)
        now = _now()
        order = Order(
            user_id=user_id,
            guest_info=request.guest_info if user_id is None else None,
            items=list(request.items),
            subtotal=summary.subtotal,
            delivery_fee=summary.delivery_fee,
            tax=summary.tax,
            grand_total=summary.total,
            delivery_address=request.delivery_address,
            contact_number=request.contact_number.strip(),
            payment_method=request.payment_method,
            status=OrderStatus.PENDING,
            payment_confirmed=request.payment_method == PaymentMethod.CASH_ON_DELIVERY,
            created_at=now,
            updated_at=now,
            notes=request.notes,
        )

        order_id = await self._guarded(
            "create order", self._store.insert(self._collection, order.to_document())
        )
        order = order.model_copy(update={"id": order_id})
        logger.info(
            f"Order {order_id} created: {len(order.items)} lines, total={order.grand_total}, "
            f"payment={order.payment_method.value}, guest={order.is_guest}"
        )

        await self._notify(NewOrder(order))
        return order

    # =========================================================================
    # READ
    # =========================================================================

    async def get_order(self, order_id: str) -> Order:
        data = await self._guarded(
            f"load order {order_id}", self._store.get(self._collection, order_id)
        )
        if data is None:
            raise OrderNotFoundException(order_id)
        return Order.from_document(order_id, data)

    async def _query(self, action: str, **kwargs: Any) -> list[Order]:
        documents = await self._guarded(action, self._store.query(self._collection, **kwargs))
        return orders_from_snapshot(QuerySnapshot(documents=documents))

    async def list_user_orders(self, user_id: str) -> list[Order]:
        orders = await self._query("list user orders", where=(("user_id", user_id),))
        return sort_newest_first(orders)

    async def list_all_orders(self) -> list[Order]:
        return await self._query("list orders", order_by="created_at", descending=True)

    async def list_orders_by_status(self, status: OrderStatus | str) -> list[Order]:
        status = OrderStatus.parse(status)
        orders = await self._query("list orders by status", where=(("status", status.value),))
        return sort_newest_first(orders)

    # =========================================================================
    # STATUS
    # =========================================================================

    async def transition(
        self,
        order_id: str,
        new_status: OrderStatus | str,
        *,
        estimated_delivery_time: datetime | None = None,
    ) -> Order:
        """
        Move an order to ``new_status``.

        Re-sending the current status is a successful no-op and sends nothing.

        Raises:
            IllegalTransitionError: Not allowed from the current status; nothing written
            OrderNotFoundException: Unknown order id
        """
        order = await self.get_order(order_id)

        result = validate_order_transition(current_status=order.status, target_status=new_status)
        if not result.allowed:
            logger.warning(
                f"Rejected transition for order {order_id}: "
                f"{order.status.value} -> {_status_value(new_status)} ({result.reason})"
            )
            raise IllegalTransitionError(
                order_id,
                order.status.value,
                _status_value(new_status),
                result.reason or "Transition not allowed.",
            )

        if result.noop:
            logger.info(f"Order {order_id} already {order.status.value}; nothing to do")
            return order

        target = OrderStatus.parse(new_status)
        updated_at = _next_timestamp(order.updated_at)
        fields: dict[str, Any] = {"status": target.value, "updated_at": updated_at}
        changes: dict[str, Any] = {"status": target, "updated_at": updated_at}
        if estimated_delivery_time is not None:
            fields["estimated_delivery_time"] = estimated_delivery_time
            changes["estimated_delivery_time"] = estimated_delivery_time

        await self._write(order_id, fields)
        updated = order.model_copy(update=changes)
        logger.info(f"Order {order_id} status {order.status.value} -> {target.value}")

        await self._notify(StatusChanged(updated, target))
        return updated

    async def confirm_order(self, order_id: str) -> Order:
        """Staff accepts a pending order."""
        return await self.transition(order_id, OrderStatus.CONFIRMED)

    async def start_preparing(self, order_id: str) -> Order:
        return await self.transition(order_id, OrderStatus.PREPARING)

    async def mark_ready(
        self, order_id: str, estimated_delivery_time: datetime | None = None
    ) -> Order:
        return await self.transition(
            order_id, OrderStatus.READY, estimated_delivery_time=estimated_delivery_time
        )

    async def mark_delivered(self, order_id: str) -> Order:
        return await self.transition(order_id, OrderStatus.DELIVERED)

    async def cancel_order(self, order_id: str) -> Order:
        """Customer or staff cancels before preparation starts."""
        return await self.transition(order_id, OrderStatus.CANCELLED)

    # =========================================================================
    # PAYMENT
    # =========================================================================

    async def confirm_payment(self, order_id: str) -> Order:
        """Mark the order paid. Status is left alone; repeat calls change nothing."""
        order = await self.get_order(order_id)
        if order.payment_confirmed:
            logger.info(f"Payment for order {order_id} already confirmed")
            return order

        updated_at = _next_timestamp(order.updated_at)
        await self._write(order_id, {"payment_confirmed": True, "updated_at": updated_at})
        updated = order.model_copy(update={"payment_confirmed": True, "updated_at": updated_at})
        logger.info(f"Payment confirmed for order {order_id} ({order.payment_method.value})")

        await self._notify(PaymentConfirmed(updated))
        return updated


def search_orders(orders: Iterable[Order], query: str) -> list[Order]:
    """Staff console filter over id, item names, contact number and guest name."""
    needle = (query or "").strip().lower()
    orders = list(orders)
    if not needle:
        return orders

    def matches(order: Order) -> bool:
        haystack = [order.id or "", order.contact_number, order.customer_name or ""]
        haystack.extend(item.food_name for item in order.items)
        return any(needle in value.lower() for value in haystack)

    return [order for order in orders if matches(order)]
