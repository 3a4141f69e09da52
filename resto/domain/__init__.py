"""Domain package."""

from .entities import CreateOrderRequest, DeliveryAddress, Food, GuestInfo, Order, OrderLine
from .value_objects import OrderStatus, PaymentMethod, UserRole

__all__ = [
    # Entities
    "Food",
    "Order",
    "OrderLine",
    "DeliveryAddress",
    "GuestInfo",
    "CreateOrderRequest",
    # Value Objects
    "OrderStatus",
    "PaymentMethod",
    "UserRole",
]
