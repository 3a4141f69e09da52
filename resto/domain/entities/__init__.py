"""Domain entities package."""

from .food import Food
from .order import CreateOrderRequest, DeliveryAddress, GuestInfo, Order, OrderLine

__all__ = [
    "Food",
    "Order",
    "OrderLine",
    "DeliveryAddress",
    "GuestInfo",
    "CreateOrderRequest",
]
