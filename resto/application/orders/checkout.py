"""Use case: turn the cart into an order and pick the next screen."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from resto.core.exceptions import StoreUnavailableError, ValidationError
from resto.core.notifications import ORDER_DETAIL_PATH, QR_PAYMENT_PATH, NavigationTarget
from resto.core.order_math import OrderSummary, compute_summary
from resto.domain.entities import CreateOrderRequest, DeliveryAddress, GuestInfo, Order
from resto.domain.value_objects import PaymentMethod
from resto.services.cart_service import CartAggregator
from resto.services.order_service import OrderLifecycleManager

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    ok: bool
    error_key: str | None = None
    order: Order | None = None
    next_route: NavigationTarget | None = None
    error_field: str | None = None
    message: str | None = None
    retryable: bool = False


def checkout_preview(cart: CartAggregator) -> OrderSummary:
    """Cost breakdown shown on the checkout screen."""
    return compute_summary(cart.to_order_lines())


async def place_order(
    cart: CartAggregator,
    *,
    manager: OrderLifecycleManager,
    delivery_address: DeliveryAddress,
    contact_number: str,
    payment_method: PaymentMethod,
    user_id: str | None = None,
    guest_info: GuestInfo | None = None,
    notes: str | None = None,
) -> CheckoutResult:
    if cart.is_empty():
        return CheckoutResult(False, "empty_cart", error_field="items")

    request = CreateOrderRequest(
        items=cart.to_order_lines(),
        delivery_address=delivery_address,
        contact_number=contact_number,
        payment_method=payment_method,
        guest_info=guest_info if user_id is None else None,
        notes=notes,
    )

    try:
        order = await manager.create_order(request, user_id)
    except ValidationError as e:
        return CheckoutResult(False, "validation_error", error_field=e.field, message=e.message)
    except StoreUnavailableError as e:
        logger.error(f"Checkout failed, store unavailable: {e}")
        return CheckoutResult(False, "store_unavailable", message=e.message, retryable=True)

    await cart.clear()

    path = QR_PAYMENT_PATH if order.payment_method == PaymentMethod.QR_CODE else ORDER_DETAIL_PATH
    return CheckoutResult(
        True,
        order=order,
        next_route=NavigationTarget(path=path, params={"orderId": order.id}),
    )
