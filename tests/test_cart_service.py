from __future__ import annotations

import json
from decimal import Decimal

import pytest

from resto.core.exceptions import ValidationError
from resto.services.cart_service import CartAggregator


@pytest.mark.asyncio
async def test_adding_same_food_twice_merges_lines(cart, nasi_lemak) -> None:
    await cart.load()

    await cart.add(nasi_lemak, 1)
    await cart.add(nasi_lemak, 2)

    lines = cart.lines()
    assert len(lines) == 1
    assert lines[0].quantity == 3
    assert lines[0].id.startswith("food-a_")


@pytest.mark.asyncio
async def test_new_instructions_replace_old_ones(cart, nasi_lemak) -> None:
    await cart.load()

    await cart.add(nasi_lemak, 1, "no sambal")
    await cart.add(nasi_lemak, 1, "extra egg")
    assert cart.lines()[0].special_instructions == "extra egg"

    await cart.add(nasi_lemak, 1, "   ")
    assert cart.lines()[0].special_instructions == "extra egg"


@pytest.mark.asyncio
async def test_set_quantity_zero_removes_line(cart, nasi_lemak, teh_tarik) -> None:
    await cart.load()
    line = await cart.add(nasi_lemak, 2)
    await cart.add(teh_tarik, 1)

    await cart.set_quantity(line.id, 0)

    assert [l.food.id for l in cart.lines()] == ["food-b"]


@pytest.mark.asyncio
async def test_set_quantity_updates_line(cart, nasi_lemak) -> None:
    await cart.load()
    line = await cart.add(nasi_lemak, 2)

    await cart.set_quantity(line.id, 5)

    assert cart.lines()[0].quantity == 5
    assert cart.count() == 5


@pytest.mark.asyncio
async def test_remove_is_idempotent(cart, nasi_lemak) -> None:
    await cart.load()
    line = await cart.add(nasi_lemak)

    await cart.remove(line.id)
    await cart.remove(line.id)

    assert cart.lines() == []
    assert cart.is_empty()


@pytest.mark.asyncio
async def test_add_rejects_non_positive_quantity(cart, nasi_lemak) -> None:
    await cart.load()

    with pytest.raises(ValidationError) as exc:
        await cart.add(nasi_lemak, 0)

    assert exc.value.field == "quantity"
    assert cart.lines() == []


@pytest.mark.asyncio
async def test_total_and_count(cart, nasi_lemak, teh_tarik) -> None:
    await cart.load()
    assert cart.total() == Decimal("0.00")

    await cart.add(nasi_lemak, 2)
    await cart.add(teh_tarik, 1)

    assert cart.total() == Decimal("34.97")
    assert cart.count() == 3
    assert cart.get_line_for_food("food-b").quantity == 1
    assert cart.get_line_for_food("missing") is None


@pytest.mark.asyncio
async def test_cart_survives_restart(storage, nasi_lemak, teh_tarik) -> None:
    first = CartAggregator(storage)
    await first.load()
    await first.add(nasi_lemak, 2, "kurang pedas")
    await first.add(teh_tarik, 1)

    second = CartAggregator(storage)
    assert not second.loaded
    lines = await second.load()

    assert second.loaded
    assert [(l.food.id, l.quantity) for l in lines] == [("food-a", 2), ("food-b", 1)]
    assert lines[0].special_instructions == "kurang pedas"
    assert lines[0].food.price == Decimal("12.99")


@pytest.mark.asyncio
async def test_load_runs_once(storage, nasi_lemak) -> None:
    cart = CartAggregator(storage)
    await cart.load()
    await cart.add(nasi_lemak)

    await storage.set_item(cart._key, "[]")
    await cart.load()

    assert len(cart.lines()) == 1


@pytest.mark.asyncio
async def test_unreadable_payload_loads_empty(storage) -> None:
    await storage.set_item("@cart_items", "{not json")
    cart = CartAggregator(storage)

    assert await cart.load() == []


@pytest.mark.asyncio
async def test_bad_lines_are_dropped_on_load(storage, nasi_lemak) -> None:
    good = {"id": "food-a_1", "food": nasi_lemak.to_dict(), "quantity": 2}
    await storage.set_item("@cart_items", json.dumps([good, {"quantity": 3}]))

    cart = CartAggregator(storage)
    lines = await cart.load()

    assert len(lines) == 1
    assert lines[0].quantity == 2


@pytest.mark.asyncio
async def test_order_lines_snapshot_catalog_values(cart, nasi_lemak) -> None:
    await cart.load()
    await cart.add(nasi_lemak, 2, "no cucumber")

    (line,) = cart.to_order_lines()

    assert line.food_id == "food-a"
    assert line.food_name == "Nasi Lemak"
    assert line.unit_price == Decimal("12.99")
    assert line.quantity == 2
    assert line.special_instructions == "no cucumber"


@pytest.mark.asyncio
async def test_clear_empties_persisted_cart(storage, nasi_lemak) -> None:
    cart = CartAggregator(storage)
    await cart.load()
    await cart.add(nasi_lemak)

    await cart.clear()

    assert json.loads(await storage.get_item("@cart_items")) == []


@pytest.mark.asyncio
async def test_add_before_load_keeps_saved_lines(storage, nasi_lemak, teh_tarik) -> None:
    first = CartAggregator(storage)
    await first.load()
    await first.add(nasi_lemak, 2)

    restarted = CartAggregator(storage)
    await restarted.add(teh_tarik, 1)
    await restarted.load()

    assert restarted.loaded
    assert [(l.food.id, l.quantity) for l in restarted.lines()] == [("food-a", 2), ("food-b", 1)]
    saved = json.loads(await storage.get_item("@cart_items"))
    assert [(raw["food"]["id"], raw["quantity"]) for raw in saved] == [("food-a", 2), ("food-b", 1)]


@pytest.mark.asyncio
async def test_clear_before_load_still_empties_storage(storage, nasi_lemak) -> None:
    first = CartAggregator(storage)
    await first.load()
    await first.add(nasi_lemak, 2)

    restarted = CartAggregator(storage)
    await restarted.clear()

    assert restarted.is_empty()
    assert json.loads(await storage.get_item("@cart_items")) == []
