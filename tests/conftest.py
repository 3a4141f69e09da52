"""Shared pytest fixtures: a fresh store, channel and service graph per test."""
from __future__ import annotations

from decimal import Decimal

import pytest
import pytest_asyncio

from resto.core.notifications import LocalNotificationChannel
from resto.core.realtime import RealtimeSyncBroker
from resto.domain.entities import (
    CreateOrderRequest,
    DeliveryAddress,
    Food,
    GuestInfo,
    OrderLine,
)
from resto.domain.value_objects import PaymentMethod
from resto.integrations.document_store import InMemoryDocumentStore
from resto.integrations.redis_storage import RedisKeyValueStorage
from resto.services.cart_service import CartAggregator
from resto.services.notification_builder import NotificationTemplates
from resto.services.notification_service import NotificationDispatcher
from resto.services.order_service import OrderLifecycleManager


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def channel() -> LocalNotificationChannel:
    return LocalNotificationChannel()


@pytest.fixture
def dispatcher(channel) -> NotificationDispatcher:
    return NotificationDispatcher(channel, NotificationTemplates("ms"))


@pytest.fixture
def manager(store, dispatcher) -> OrderLifecycleManager:
    return OrderLifecycleManager(store, dispatcher)


@pytest_asyncio.fixture
async def broker(store):
    broker = RealtimeSyncBroker(store)
    yield broker
    await broker.close()


@pytest.fixture
def storage() -> RedisKeyValueStorage:
    return RedisKeyValueStorage(redis_url=None)


@pytest.fixture
def cart(storage) -> CartAggregator:
    return CartAggregator(storage)


@pytest.fixture
def nasi_lemak() -> Food:
    return Food(id="food-a", name="Nasi Lemak", price=Decimal("12.99"))


@pytest.fixture
def teh_tarik() -> Food:
    return Food(id="food-b", name="Teh Tarik", price=Decimal("8.99"))


@pytest.fixture
def address() -> DeliveryAddress:
    return DeliveryAddress(
        street="12 Jalan Ampang",
        city="Kuala Lumpur",
        state="WP Kuala Lumpur",
        postal_code="50450",
        country="Malaysia",
    )


@pytest.fixture
def guest() -> GuestInfo:
    return GuestInfo(full_name="Aisyah Rahman", email="aisyah@example.com", phone_number="0123456789")


@pytest.fixture
def make_request(address):
    """Factory for checkout requests; defaults to one cash line for a signed-in user."""

    def _make(
        items: list[OrderLine] | None = None,
        *,
        payment_method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY,
        guest_info: GuestInfo | None = None,
        delivery_address: DeliveryAddress | None = None,
        contact_number: str = "0123456789",
        notes: str | None = None,
    ) -> CreateOrderRequest:
        if items is None:
            items = [
                OrderLine(
                    food_id="food-a",
                    food_name="Nasi Lemak",
                    quantity=1,
                    unit_price=Decimal("12.99"),
                )
            ]
        return CreateOrderRequest(
            items=items,
            delivery_address=delivery_address or address,
            contact_number=contact_number,
            payment_method=payment_method,
            guest_info=guest_info,
            notes=notes,
        )

    return _make
