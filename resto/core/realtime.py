"""
Realtime order sync - fans store change streams out to subscribers.

Each subscription gets an initial snapshot and then one snapshot per
committed change, delivered in commit order by its own worker task. A
snapshot older than the last one handed to a subscriber is dropped.
"""
import asyncio
import inspect
import itertools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from resto.core.constants import ORDERS_COLLECTION
from resto.domain.entities import Order
from resto.domain.value_objects import OrderStatus
from resto.integrations.document_store import DocumentStore, QuerySnapshot

logger = logging.getLogger(__name__)

OrdersCallback = Callable[[list[Order]], Awaitable[None] | None]


@dataclass(frozen=True, slots=True)
class OrderFilter:
    """Which orders a subscriber wants: one customer's, one status, or all."""

    user_id: str | None = None
    status: OrderStatus | None = None

    @classmethod
    def for_user(cls, user_id: str) -> "OrderFilter":
        return cls(user_id=user_id)

    @classmethod
    def all_orders(cls) -> "OrderFilter":
        return cls()

    @classmethod
    def by_status(cls, status: OrderStatus | str) -> "OrderFilter":
        return cls(status=OrderStatus.parse(status))

    @property
    def is_all(self) -> bool:
        return self.user_id is None and self.status is None

    def where(self) -> tuple[tuple[str, Any], ...]:
        clauses: list[tuple[str, Any]] = []
        if self.user_id is not None:
            clauses.append(("user_id", self.user_id))
        if self.status is not None:
            clauses.append(("status", self.status.value))
        return tuple(clauses)


def orders_from_snapshot(snapshot: QuerySnapshot) -> list[Order]:
    orders: list[Order] = []
    for doc in snapshot.documents:
        try:
            orders.append(Order.from_document(doc.id, doc.data))
        except Exception as e:
            logger.warning(f"Skipping malformed order document {doc.id}: {e}")
    return orders


def sort_newest_first(orders: list[Order]) -> list[Order]:
    return sorted(orders, key=lambda order: order.created_at, reverse=True)


class Subscription:
    """Handle returned by ``RealtimeSyncBroker.subscribe``.

    Calling it (or ``unsubscribe()``) detaches the store listener and stops
    callbacks immediately; repeated calls do nothing.
    """

    def __init__(self, subscription_id: int, order_filter: OrderFilter, callback: OrdersCallback):
        self.id = subscription_id
        self.filter = order_filter
        self._callback = callback
        self._queue: asyncio.Queue[QuerySnapshot] = asyncio.Queue()
        self._worker: asyncio.Task | None = None
        self._detach: Callable[[], None] | None = None
        self._on_close: Callable[["Subscription"], None] | None = None
        self._closed = False
        self._last_queued_version = -1
        self._last_delivered_version = -1

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def last_version(self) -> int:
        """Store version of the last snapshot handed to the callback."""
        return self._last_delivered_version

    def _start(self, detach: Callable[[], None], on_close: Callable[["Subscription"], None]) -> None:
        self._detach = detach
        self._on_close = on_close
        self._worker = asyncio.create_task(self._run())

    def _enqueue(self, snapshot: QuerySnapshot) -> None:
        if self._closed:
            return
        if snapshot.version < self._last_queued_version:
            logger.debug(
                f"Subscription {self.id}: dropping stale snapshot v{snapshot.version}"
                f" (have v{self._last_queued_version})"
            )
            return
        self._last_queued_version = snapshot.version
        self._queue.put_nowait(snapshot)

    def _on_stream_error(self, error: Exception) -> None:
        # The store client reconnects on its own; keep listening.
        logger.warning(f"Subscription {self.id}: order stream error, staying subscribed: {error}")

    def _orders_for(self, snapshot: QuerySnapshot) -> list[Order]:
        orders = orders_from_snapshot(snapshot)
        if self.filter.is_all:
            return orders
        return sort_newest_first(orders)

    async def _run(self) -> None:
        while True:
            snapshot = await self._queue.get()
            try:
                if self._closed or snapshot.version < self._last_delivered_version:
                    continue
                result = self._callback(self._orders_for(snapshot))
                if inspect.isawaitable(result):
                    await result
                self._last_delivered_version = snapshot.version
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Subscription {self.id}: callback failed: {e}")
            finally:
                self._queue.task_done()

    async def flush(self) -> None:
        """Wait until every snapshot received so far has been delivered."""
        if self._closed:
            return
        await self._queue.join()

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._detach is not None:
            self._detach()
        if self._worker is not None:
            self._worker.cancel()
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
        if self._on_close is not None:
            self._on_close(self)
        logger.debug(f"Subscription {self.id} closed")

    __call__ = unsubscribe


class RealtimeSyncBroker:
    """Keeps every open order view in step with the document store.

    Subscriptions are independent: each reads the store on its own and no
    ordering is promised across them.
    """

    def __init__(self, store: DocumentStore, collection: str = ORDERS_COLLECTION):
        self._store = store
        self._collection = collection
        self._subscriptions: dict[int, Subscription] = {}
        self._ids = itertools.count(1)

    @property
    def active_subscriptions(self) -> int:
        return len(self._subscriptions)

    async def subscribe(self, order_filter: OrderFilter, callback: OrdersCallback) -> Subscription:
        subscription = Subscription(next(self._ids), order_filter, callback)

        # The all-orders view relies on store ordering; filtered views are
        # re-sorted locally since those queries are not indexed by date.
        detach = self._store.watch(
            self._collection,
            subscription._enqueue,
            where=order_filter.where(),
            order_by="created_at" if order_filter.is_all else None,
            descending=order_filter.is_all,
            on_error=subscription._on_stream_error,
        )
        # Nothing is registered or started until the stream is open.
        subscription._start(detach, self._forget)
        self._subscriptions[subscription.id] = subscription
        logger.info(
            f"Subscription {subscription.id} opened "
            f"(user={order_filter.user_id}, status={order_filter.status})"
        )
        return subscription

    async def subscribe_user_orders(self, user_id: str, callback: OrdersCallback) -> Subscription:
        return await self.subscribe(OrderFilter.for_user(user_id), callback)

    async def subscribe_all_orders(self, callback: OrdersCallback) -> Subscription:
        return await self.subscribe(OrderFilter.all_orders(), callback)

    def _forget(self, subscription: Subscription) -> None:
        self._subscriptions.pop(subscription.id, None)

    async def close(self) -> None:
        """Unsubscribe everyone."""
        for subscription in list(self._subscriptions.values()):
            subscription.unsubscribe()
