"""
Cart store — in-memory user id → Cart map.
"""

from __future__ import annotations

import asyncio
from datetime import datetime

from cartsync._types import Cart


class CartStore:
    """
    In-memory cart store keyed by user id.

    Note: single-process only. Carts are returned by reference; callers
    mutate them inside the user's sequencer slot and call update().
    """

    def __init__(self) -> None:
        self._carts: dict[str, Cart] = {}
        self._lock = asyncio.Lock()

    async def get(self, user_id: str) -> Cart | None:
        async with self._lock:
            return self._carts.get(user_id)

    async def set(self, user_id: str, cart: Cart) -> None:
        """Store as-is, without touching timestamps."""
        async with self._lock:
            self._carts[user_id] = cart

    async def update(self, user_id: str, cart: Cart, now: datetime | None = None) -> None:
        """Store and bump updated/last-accessed timestamps."""
        cart.touch(now)
        async with self._lock:
            self._carts[user_id] = cart

    async def delete(self, user_id: str) -> bool:
        async with self._lock:
            return self._carts.pop(user_id, None) is not None

    async def exists(self, user_id: str) -> bool:
        async with self._lock:
            return user_id in self._carts

    async def snapshot(self) -> list[tuple[str, Cart]]:
        """Point-in-time copy of the entries, safe to iterate while mutating."""
        async with self._lock:
            return list(self._carts.items())

    def __len__(self) -> int:
        return len(self._carts)

    def clear(self) -> None:
        self._carts.clear()


__all__ = ("CartStore",)
