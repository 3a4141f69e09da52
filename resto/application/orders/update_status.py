"""Use case: staff moves an order along the fulfillment path."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from resto.core.exceptions import IllegalTransitionError, OrderNotFoundException, StoreUnavailableError
from resto.domain.entities import Order
from resto.domain.value_objects import OrderStatus
from resto.services.order_service import OrderLifecycleManager


@dataclass
class StatusUpdateResult:
    ok: bool
    error_key: str | None = None
    order: Order | None = None
    reason: str | None = None
    retryable: bool = False


async def update_order_status(
    order_id: str,
    new_status: OrderStatus | str,
    *,
    manager: OrderLifecycleManager,
    estimated_delivery_time: datetime | None = None,
) -> StatusUpdateResult:
    try:
        order = await manager.transition(
            order_id, new_status, estimated_delivery_time=estimated_delivery_time
        )
    except IllegalTransitionError as e:
        return StatusUpdateResult(False, "illegal_transition", reason=e.message)
    except OrderNotFoundException:
        return StatusUpdateResult(False, "not_found")
    except StoreUnavailableError as e:
        return StatusUpdateResult(False, "store_unavailable", reason=e.message, retryable=True)
    return StatusUpdateResult(True, order=order)
