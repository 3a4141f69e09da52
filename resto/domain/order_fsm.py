"""Order status transition rules (single source of truth)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from resto.domain.value_objects import OrderStatus

# Forward-only fulfillment path; cancellation only before preparation starts.
ALLOWED_TRANSITIONS: Mapping[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY}),
    OrderStatus.READY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

CANCELLABLE_STATUSES = frozenset(
    status
    for status, targets in ALLOWED_TRANSITIONS.items()
    if OrderStatus.CANCELLED in targets
)


@dataclass(frozen=True, slots=True)
class TransitionValidationResult:
    allowed: bool
    reason: str | None = None
    noop: bool = False


def _parse(status: str | OrderStatus | None) -> OrderStatus | None:
    if status is None:
        return None
    try:
        return OrderStatus.parse(status)
    except ValueError:
        return None


def validate_order_transition(
    *,
    current_status: str | OrderStatus,
    target_status: str | OrderStatus,
) -> TransitionValidationResult:
    """Check a requested status change against the transition table."""
    if not target_status:
        return TransitionValidationResult(False, "No target status given.")

    target = _parse(target_status)
    if target is None:
        return TransitionValidationResult(False, f"Unsupported status: {target_status}")

    current = _parse(current_status)
    if current is None:
        return TransitionValidationResult(False, f"Unsupported current status: {current_status}")

    if current == target:
        return TransitionValidationResult(True, noop=True)

    if current in TERMINAL_STATUSES:
        return TransitionValidationResult(
            False,
            f"Order is already '{current.value}' and cannot change.",
        )

    if target == OrderStatus.CANCELLED and current not in CANCELLABLE_STATUSES:
        return TransitionValidationResult(
            False,
            f"Cannot cancel an order that is already '{current.value}'.",
        )

    if target not in ALLOWED_TRANSITIONS[current]:
        return TransitionValidationResult(
            False,
            f"Transition '{current.value} -> {target.value}' is not allowed.",
        )

    return TransitionValidationResult(True)


def next_statuses(current_status: str | OrderStatus) -> list[OrderStatus]:
    """Statuses staff may move an order to from its current one."""
    current = _parse(current_status)
    if current is None:
        return []
    return sorted(ALLOWED_TRANSITIONS[current], key=lambda s: list(OrderStatus).index(s))
