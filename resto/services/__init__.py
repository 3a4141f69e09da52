"""Business services orchestrating domain logic."""

from .admin_service import AdminService
from .cart_service import CartAggregator, CartLine
from .notification_builder import NotificationContent, NotificationTemplates
from .notification_service import (
    NewOrder,
    NotificationDispatcher,
    PaymentConfirmed,
    StatusChanged,
)
from .order_service import OrderLifecycleManager, search_orders
from .stats import BusinessReport, build_business_report

__all__ = [
    "AdminService",
    "CartAggregator",
    "CartLine",
    "NotificationContent",
    "NotificationTemplates",
    "NotificationDispatcher",
    "NewOrder",
    "PaymentConfirmed",
    "StatusChanged",
    "OrderLifecycleManager",
    "search_orders",
    "BusinessReport",
    "build_business_report",
]
