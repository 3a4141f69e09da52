"""Cart Aggregator - the customer's in-progress selection, persisted locally."""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from resto.core.constants import CART_STORAGE_KEY
from resto.core.exceptions import ValidationError
from resto.core.order_math import calc_items_total
from resto.domain.entities import Food, OrderLine
from resto.integrations.redis_storage import KeyValueStorage, load_json, save_json

logger = logging.getLogger(__name__)


@dataclass
class CartLine:
    """Single food in the cart."""

    id: str
    food: Food
    quantity: int
    special_instructions: str | None = None
    added_at: float = field(default_factory=time.time)

    @property
    def unit_price(self) -> Decimal:
        return self.food.price

    @property
    def line_total(self) -> Decimal:
        return self.food.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "food": self.food.to_dict(),
            "quantity": int(self.quantity),
            "special_instructions": self.special_instructions,
            "added_at": float(self.added_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartLine:
        return cls(
            id=str(data["id"]),
            food=Food.from_dict(data["food"]),
            quantity=int(data.get("quantity", 1)),
            special_instructions=data.get("special_instructions") or None,
            added_at=float(data.get("added_at", time.time())),
        )

    def to_order_line(self) -> OrderLine:
        """Snapshot name and price as they are right now."""
        return OrderLine(
            food_id=self.food.id,
            food_name=self.food.name,
            quantity=self.quantity,
            unit_price=self.food.price,
            special_instructions=self.special_instructions,
        )


def _new_line_id(food_id: str) -> str:
    return f"{food_id}_{uuid.uuid4().hex[:8]}"


class CartAggregator:
    """One line per food; every mutation is written back to local storage.

    Call ``load()`` once at startup before reading; a mutation made earlier
    loads the saved lines first. Reads are synchronous and always recomputed
    from the current lines.
    """

    def __init__(self, storage: KeyValueStorage, key: str = CART_STORAGE_KEY):
        self._storage = storage
        self._key = key
        self._lines: list[CartLine] = []
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load(self) -> list[CartLine]:
        if self._loaded:
            return self.lines()
        payload = await load_json(self._storage, self._key)
        lines: list[CartLine] = []
        if isinstance(payload, list):
            for raw in payload:
                try:
                    line = CartLine.from_dict(raw)
                except Exception as e:
                    logger.warning(f"Dropping unreadable cart line: {e}")
                    continue
                if line.quantity >= 1:
                    lines.append(line)
        elif payload is not None:
            logger.warning(f"Ignoring cart payload of type {type(payload).__name__}")
        self._lines = lines
        self._loaded = True
        logger.debug(f"Cart loaded with {len(lines)} lines")
        return self.lines()

    async def _ensure_loaded(self) -> None:
        # Saved lines must be read before the first write or they are overwritten.
        if not self._loaded:
            await self.load()

    async def _persist(self) -> None:
        await save_json(self._storage, self._key, [line.to_dict() for line in self._lines])

    def _find(self, line_id: str) -> CartLine | None:
        return next((line for line in self._lines if line.id == line_id), None)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def add(
        self, food: Food, quantity: int = 1, special_instructions: str | None = None
    ) -> CartLine:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1.", field="quantity")
        await self._ensure_loaded()

        instructions = (special_instructions or "").strip() or None
        line = self.get_line_for_food(food.id)
        if line is not None:
            line.quantity += quantity
            if instructions:
                line.special_instructions = instructions
        else:
            line = CartLine(
                id=_new_line_id(food.id),
                food=food,
                quantity=quantity,
                special_instructions=instructions,
            )
            self._lines.append(line)

        await self._persist()
        return line

    async def remove(self, line_id: str) -> None:
        """Drop a line. Unknown ids are ignored."""
        await self._ensure_loaded()
        line = self._find(line_id)
        if line is None:
            return
        self._lines.remove(line)
        await self._persist()

    async def set_quantity(self, line_id: str, quantity: int) -> None:
        if quantity <= 0:
            await self.remove(line_id)
            return
        await self._ensure_loaded()
        line = self._find(line_id)
        if line is None:
            return
        line.quantity = quantity
        await self._persist()

    async def clear(self) -> None:
        await self._ensure_loaded()
        self._lines = []
        await self._persist()

    # =========================================================================
    # READS
    # =========================================================================

    def lines(self) -> list[CartLine]:
        return list(self._lines)

    def total(self) -> Decimal:
        return calc_items_total(self._lines)

    def count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def get_line_for_food(self, food_id: str) -> CartLine | None:
        return next((line for line in self._lines if line.food.id == food_id), None)

    def is_empty(self) -> bool:
        return not self._lines

    def to_order_lines(self) -> list[OrderLine]:
        return [line.to_order_line() for line in self._lines]
