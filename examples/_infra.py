"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

from cartsync import configure_logging
from cartsync.store import CartStore


def item(product_id: str, price: str, product_type: str = "device", quantity: int = 1) -> dict[str, Any]:
    return {
        "product_id": product_id,
        "name": product_id.replace("-", " ").title(),
        "product_type": product_type,
        "quantity": quantity,
        "unit_price": price,
    }


# Store whose delete fails, as if the process died right after the provider charged
class CrashingCartStore(CartStore):
    async def delete(self, user_id: str) -> bool:
        raise RuntimeError("process crashed during cleanup")


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    configure_logging(level="WARNING")
    asyncio.run(main())
