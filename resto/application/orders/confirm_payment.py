"""Use cases: show, confirm or abandon payment for an order."""
from __future__ import annotations

import io
from dataclasses import dataclass

from resto.core.constants import MERCHANT_NAME
from resto.core.exceptions import IllegalTransitionError, OrderNotFoundException, StoreUnavailableError
from resto.core.notifications import CART_PATH, ORDER_DETAIL_PATH, NavigationTarget
from resto.core.qr_generator import generate_payment_qr, payment_qr_payload
from resto.domain.entities import Order
from resto.domain.value_objects import OrderStatus, PaymentMethod
from resto.services.order_service import OrderLifecycleManager


@dataclass
class PaymentDecisionResult:
    ok: bool
    error_key: str | None = None
    order: Order | None = None
    next_route: NavigationTarget | None = None
    retryable: bool = False


@dataclass
class QrPaymentScreen:
    ok: bool
    error_key: str | None = None
    order: Order | None = None
    payload: str | None = None
    image: io.BytesIO | None = None
    retryable: bool = False


async def show_qr_payment(
    order_id: str, *, manager: OrderLifecycleManager, merchant: str = MERCHANT_NAME
) -> QrPaymentScreen:
    """QR code the customer scans to pay. ``image`` is None when rendering fails."""
    try:
        order = await manager.get_order(order_id)
    except OrderNotFoundException:
        return QrPaymentScreen(False, "not_found")
    except StoreUnavailableError:
        return QrPaymentScreen(False, "store_unavailable", retryable=True)

    if order.payment_method != PaymentMethod.QR_CODE:
        return QrPaymentScreen(False, "not_qr_order", order=order)
    if order.status == OrderStatus.CANCELLED:
        return QrPaymentScreen(False, "order_cancelled", order=order)
    if order.payment_confirmed:
        return QrPaymentScreen(False, "already_processed", order=order)

    return QrPaymentScreen(
        True,
        order=order,
        payload=payment_qr_payload(order.id, order.grand_total, merchant),
        image=generate_payment_qr(order.id, order.grand_total, merchant),
    )


async def confirm_payment(order_id: str, *, manager: OrderLifecycleManager) -> PaymentDecisionResult:
    """Staff marks an order as paid."""
    try:
        order = await manager.get_order(order_id)
        if order.payment_confirmed:
            return PaymentDecisionResult(False, "already_processed", order=order)
        order = await manager.confirm_payment(order_id)
    except OrderNotFoundException:
        return PaymentDecisionResult(False, "not_found")
    except StoreUnavailableError:
        return PaymentDecisionResult(False, "store_unavailable", retryable=True)
    return PaymentDecisionResult(True, order=order)


async def report_qr_payment(
    order_id: str, *, manager: OrderLifecycleManager
) -> PaymentDecisionResult:
    """Customer says they have paid by QR. Trusted as-is; no transfer is checked."""
    try:
        order = await manager.get_order(order_id)
        if order.payment_method != PaymentMethod.QR_CODE:
            return PaymentDecisionResult(False, "not_qr_order", order=order)
        order = await manager.confirm_payment(order_id)
    except OrderNotFoundException:
        return PaymentDecisionResult(False, "not_found")
    except StoreUnavailableError:
        return PaymentDecisionResult(False, "store_unavailable", retryable=True)
    return PaymentDecisionResult(
        True,
        order=order,
        next_route=NavigationTarget(path=ORDER_DETAIL_PATH, params={"orderId": order_id}),
    )


async def cancel_qr_payment(
    order_id: str, *, manager: OrderLifecycleManager
) -> PaymentDecisionResult:
    """Customer backs out on the QR screen; the order is cancelled."""
    try:
        order = await manager.cancel_order(order_id)
    except OrderNotFoundException:
        return PaymentDecisionResult(False, "not_found")
    except IllegalTransitionError:
        return PaymentDecisionResult(False, "cannot_cancel")
    except StoreUnavailableError:
        return PaymentDecisionResult(False, "store_unavailable", retryable=True)
    return PaymentDecisionResult(True, order=order, next_route=NavigationTarget(path=CART_PATH))
