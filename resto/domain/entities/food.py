"""Catalog food entity."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field


class Food(BaseModel):
    """A catalog entry a customer can put in the cart."""

    id: str = Field(..., min_length=1, description="Catalog document ID")
    name: str = Field(..., min_length=1, description="Display name")
    price: Decimal = Field(..., ge=0, description="Unit price in RM")
    description: Optional[str] = Field(None, description="Menu description")
    menu_id: Optional[str] = Field(None, description="Owning menu")
    is_available: bool = Field(True, description="Shown as orderable")

    class Config:
        """Pydantic config."""
        frozen = True

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation for local storage."""
        return {
            "id": self.id,
            "name": self.name,
            "price": str(self.price),
            "description": self.description,
            "menu_id": self.menu_id,
            "is_available": self.is_available,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Food:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            price=Decimal(str(data.get("price", "0"))),
            description=data.get("description"),
            menu_id=data.get("menu_id"),
            is_available=bool(data.get("is_available", True)),
        )
