"""
Short booking references
========================

Customers quote a 4-digit code on the phone, so the internal UUID is not
practical.  Codes are drawn at random and checked against the store instead
of coming from a counter, so there is no "next value" row to contend on.

The space holds 10,000 codes.  After ``MAX_ATTEMPTS`` failed draws the
allocator gives up with ``IdSpaceExhausted`` rather than spinning: at that
point the space must be widened or old orders pruned.
"""

from __future__ import annotations

import random
from typing import Callable, Optional

from airport_taxi.domain.ports import OrderStore

MAX_ATTEMPTS = 100
CODE_SPACE = 10_000


class IdSpaceExhausted(RuntimeError):
    """No free generated id was found within the retry bound."""


class GeneratedIdConflict(RuntimeError):
    """The store rejected a generated id that was free when it was drawn."""


class GeneratedIdAllocator:
    def __init__(
        self,
        store: OrderStore,
        randint: Optional[Callable[[int, int], int]] = None,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.store = store
        self.randint = randint or random.SystemRandom().randint
        self.max_attempts = max_attempts

    def draw(self) -> str:
        return f"{self.randint(0, CODE_SPACE - 1):04d}"

    async def allocate(self) -> str:
        for _ in range(self.max_attempts):
            candidate = self.draw()
            if not await self.store.exists_by_generated_id(candidate):
                return candidate
        raise IdSpaceExhausted(
            f"Unable to generate a unique order number after {self.max_attempts} attempts."
        )
