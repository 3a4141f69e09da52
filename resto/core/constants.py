"""Application-wide constants."""
from __future__ import annotations

from decimal import Decimal

# Pricing policy: flat delivery fee, tax on food only.
DELIVERY_FEE = Decimal("2.99")
TAX_RATE = Decimal("0.08")
MONEY_QUANT = Decimal("0.01")
CURRENCY = "RM"

# Document store collections
ORDERS_COLLECTION = "orders"
USERS_COLLECTION = "users"

# Local key-value storage
CART_STORAGE_KEY = "@cart_items"

MERCHANT_NAME = "BlockTwenty9"
