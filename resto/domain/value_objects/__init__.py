"""Value Objects for domain model."""
from __future__ import annotations

from enum import Enum


class OrderStatus(str, Enum):
    """Fulfillment status of an order."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: str | OrderStatus) -> OrderStatus:
        """Accept enum members or raw strings (any case, surrounding spaces)."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class PaymentMethod(str, Enum):
    """Supported payment modes."""

    CASH_ON_DELIVERY = "cash_on_delivery"
    QR_CODE = "qr_code"


class UserRole(str, Enum):
    """User roles."""

    USER = "user"
    ADMIN = "admin"


__all__ = ["OrderStatus", "PaymentMethod", "UserRole"]
