"""Custom exceptions for the ordering core."""
from __future__ import annotations


class RestoException(Exception):
    """Base exception for all ordering errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(RestoException):
    """Incomplete or invalid checkout input. Raised before any store write."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class IllegalTransitionError(RestoException):
    """Rejected order status change."""

    def __init__(self, order_id: str, current_status: str, target_status: str, reason: str) -> None:
        super().__init__(reason)
        self.order_id = order_id
        self.current_status = current_status
        self.target_status = target_status


class OrderNotFoundException(RestoException):
    """Order not found in the document store."""

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order with ID {order_id} not found")
        self.order_id = order_id


class StoreUnavailableError(RestoException):
    """Network or backend failure on a store read, write or stream."""

    pass


class NotificationDeliveryError(RestoException):
    """Notification channel failure. Logged, never propagated to callers."""

    pass


class ConfigurationException(RestoException):
    """Configuration errors."""

    pass
