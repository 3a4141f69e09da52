"""Order aggregate and its value parts."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from resto.domain.value_objects import OrderStatus, PaymentMethod


class OrderLine(BaseModel):
    """Per-item snapshot taken when the order is created.

    Name and price are copied from the catalog, never referenced, so later
    menu edits do not change historical orders.
    """

    food_id: str = Field(..., min_length=1)
    food_name: str
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0)
    special_instructions: Optional[str] = None

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class DeliveryAddress(BaseModel):
    """Where the order goes. Completeness is checked at checkout."""

    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    special_instructions: Optional[str] = None

    class Config:
        """Pydantic config."""
        frozen = True


class GuestInfo(BaseModel):
    """Contact details embedded in an order placed without an account."""

    full_name: str = ""
    email: str = ""
    phone_number: str = ""

    class Config:
        """Pydantic config."""
        frozen = True


class CreateOrderRequest(BaseModel):
    """Checkout form contents submitted to the lifecycle manager."""

    items: List[OrderLine]
    delivery_address: DeliveryAddress
    contact_number: str = ""
    payment_method: PaymentMethod
    guest_info: Optional[GuestInfo] = None
    notes: Optional[str] = None


class Order(BaseModel):
    """Priced, addressed, status-tracked purchase request."""

    id: Optional[str] = None
    user_id: Optional[str] = None
    guest_info: Optional[GuestInfo] = None
    items: List[OrderLine] = Field(..., min_length=1)
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    grand_total: Decimal
    delivery_address: DeliveryAddress
    contact_number: str
    payment_method: PaymentMethod
    status: OrderStatus = OrderStatus.PENDING
    payment_confirmed: bool = False
    created_at: datetime
    updated_at: datetime
    estimated_delivery_time: Optional[datetime] = None
    notes: Optional[str] = None

    class Config:
        """Pydantic config."""
        frozen = True

    @model_validator(mode="after")
    def _check_identity(self) -> Order:
        if (self.user_id is None) == (self.guest_info is None):
            raise ValueError("order needs exactly one of user_id or guest_info")
        return self

    @property
    def short_code(self) -> str:
        """Last 8 characters of the id, upper-cased, as shown to customers."""
        return (self.id or "")[-8:].upper()

    @property
    def customer_name(self) -> Optional[str]:
        return self.guest_info.full_name if self.guest_info else None

    @property
    def is_guest(self) -> bool:
        return self.guest_info is not None

    def to_document(self) -> dict[str, Any]:
        """Store representation (id lives outside the document)."""
        data = self.model_dump(mode="python", exclude={"id"})
        if self.guest_info is None:
            data.pop("guest_info")
        if self.user_id is None:
            data.pop("user_id")
        data["status"] = self.status.value
        data["payment_method"] = self.payment_method.value
        return data

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Order:
        return cls.model_validate({**data, "id": doc_id})
