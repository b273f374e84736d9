"""Unit tests for the 4-digit booking reference allocator."""

from itertools import cycle
from unittest.mock import AsyncMock

import pytest

from airport_taxi.domain.generated_id import (
    MAX_ATTEMPTS,
    GeneratedIdAllocator,
    IdSpaceExhausted,
)
from airport_taxi.domain.lifecycle import OrderLifecycle


def scripted(*values):
    """randint replacement returning *values* in order, then repeating the last."""
    it = iter(values)
    last = values[-1]

    def _randint(low, high):
        assert (low, high) == (0, 9999)
        try:
            return next(it)
        except StopIteration:
            return last

    return _randint


class TestDraw:
    def test_codes_are_zero_padded(self):
        allocator = GeneratedIdAllocator(AsyncMock(), randint=scripted(7))
        assert allocator.draw() == "0007"

    def test_codes_have_four_digits(self):
        allocator = GeneratedIdAllocator(AsyncMock())
        for _ in range(50):
            code = allocator.draw()
            assert len(code) == 4 and code.isdigit()


class TestAllocate:
    @pytest.mark.asyncio
    async def test_skips_taken_codes(self):
        store = AsyncMock()
        store.exists_by_generated_id = AsyncMock(side_effect=[True, True, False])
        allocator = GeneratedIdAllocator(store, randint=scripted(1, 2, 3))

        assert await allocator.allocate() == "0003"
        assert store.exists_by_generated_id.await_count == 3

    @pytest.mark.asyncio
    async def test_exhausted_after_exactly_max_attempts(self):
        store = AsyncMock()
        store.exists_by_generated_id = AsyncMock(return_value=True)
        allocator = GeneratedIdAllocator(store, randint=scripted(5))

        with pytest.raises(IdSpaceExhausted):
            await allocator.allocate()
        assert store.exists_by_generated_id.await_count == MAX_ATTEMPTS == 100

    @pytest.mark.asyncio
    async def test_succeeds_on_last_attempt(self):
        store = AsyncMock()
        store.exists_by_generated_id = AsyncMock(
            side_effect=[True] * (MAX_ATTEMPTS - 1) + [False]
        )
        allocator = GeneratedIdAllocator(store, randint=scripted(9))
        assert await allocator.allocate() == "0009"

    @pytest.mark.asyncio
    async def test_nearly_full_space_still_allocates(self):
        """Only 100 codes are free; a draw that lands on one succeeds."""
        taken = {f"{n:04d}" for n in range(9900)}
        store = AsyncMock()
        store.exists_by_generated_id = AsyncMock(side_effect=lambda code: code in taken)

        walk = cycle([0, 1, 2, 9950])
        allocator = GeneratedIdAllocator(store, randint=lambda low, high: next(walk))
        assert await allocator.allocate() == "9950"


class TestUniqueness:
    @pytest.mark.asyncio
    async def test_created_orders_get_distinct_codes(self, lifecycle, store, order_input):
        for _ in range(30):
            await lifecycle.create(order_input(), "en")
        codes = [o.generated_id for o in store.orders.values()]
        assert len(codes) == len(set(codes)) == 30

    @pytest.mark.asyncio
    async def test_lifecycle_surfaces_exhaustion(self, store, notifier, order_input):
        allocator = GeneratedIdAllocator(store, randint=scripted(1))
        lifecycle = OrderLifecycle(store, notifier, allocator=allocator)
        await lifecycle.create(order_input(), "en")

        with pytest.raises(IdSpaceExhausted):
            await lifecycle.create(order_input(), "en")
        assert len(store.orders) == 1
