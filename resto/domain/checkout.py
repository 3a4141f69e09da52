"""Checkout input validation.

Runs before the lifecycle manager touches the store, so a rejected form
never produces a partial order.
"""
from __future__ import annotations

import re

from resto.core.exceptions import ValidationError
from resto.domain.entities import CreateOrderRequest, DeliveryAddress, GuestInfo

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_ADDRESS_FIELDS = (
    ("street", "Street address is required."),
    ("city", "City is required."),
    ("state", "State is required."),
    ("postal_code", "Postal code is required."),
    ("country", "Country is required."),
)


def _blank(value: str | None) -> bool:
    return not (value or "").strip()


def is_valid_email(email: str | None) -> bool:
    return bool(email) and _EMAIL_RE.match(email.strip()) is not None


def validate_delivery_address(address: DeliveryAddress) -> None:
    for field_name, message in _ADDRESS_FIELDS:
        if _blank(getattr(address, field_name)):
            raise ValidationError(message, field=f"delivery_address.{field_name}")


def validate_guest_info(guest: GuestInfo) -> None:
    if _blank(guest.full_name):
        raise ValidationError("Full name is required.", field="guest_info.full_name")
    if not is_valid_email(guest.email):
        raise ValidationError("A valid email address is required.", field="guest_info.email")
    if _blank(guest.phone_number):
        raise ValidationError("Phone number is required.", field="guest_info.phone_number")


def validate_order_request(request: CreateOrderRequest, user_id: str | None) -> None:
    """Raise ValidationError on the first problem found."""
    if not request.items:
        raise ValidationError("Cart is empty.", field="items")

    if user_id is not None and request.guest_info is not None:
        raise ValidationError(
            "An order belongs to a signed-in user or a guest, not both.",
            field="guest_info",
        )
    if user_id is None:
        if request.guest_info is None:
            raise ValidationError("Guest details are required.", field="guest_info")
        validate_guest_info(request.guest_info)
    elif _blank(user_id):
        raise ValidationError("User id is empty.", field="user_id")

    validate_delivery_address(request.delivery_address)

    if _blank(request.contact_number):
        raise ValidationError("Contact number is required.", field="contact_number")
