"""
Checkout Example — one order per cart, even across retries and crashes.

Run: uv run python examples/checkout_example.py
"""

import asyncio

from cartsync import CartService, TaxContext
from cartsync.provider import MemoryCommerceProvider
from examples._infra import CrashingCartStore, banner, item, run


async def main() -> None:
    banner("Checkout")

    # 1. Happy path with Ontario HST
    print("\n1. Checkout:")
    provider = MemoryCommerceProvider()
    service = CartService(provider)
    await service.add_item("alice", item("pixel-9", "999.99"))
    await service.add_item("alice", item("pixel-case", "79.99", "accessory"))

    summary = await service.get_summary("alice")
    print(f"   subtotal={summary.subtotal} tax={summary.total_tax} total={summary.total}")

    result = await service.checkout("alice")
    print(f"   order={result.order_id} total={result.total}")

    # 2. Two concurrent checkouts, one order
    print("\n2. Concurrent double checkout:")
    await service.add_item("bob", item("earbuds", "199.00", "accessory"))
    await service.set_tax_context("bob", TaxContext("CA-QC"))
    first, second = await asyncio.gather(service.checkout("bob"), service.checkout("bob"))
    print(f"   first:  ok={first.ok} order={first.order_id} total={first.total}")
    print(f"   second: ok={second.ok} error={second.error!r}")

    # 3. Crash after the provider charged
    print("\n3. Cleanup crash, then retry:")
    crashing = CartService(provider, carts=CrashingCartStore())
    await crashing.add_item("carol", item("tablet", "499.00"))
    before = provider.checkout_calls
    r1 = await crashing.checkout("carol")
    r2 = await crashing.checkout("carol")
    print(f"   attempt 1: order={r1.order_id}")
    print(f"   attempt 2: order={r2.order_id} (cached)")
    print(f"   provider checkouts: {provider.checkout_calls - before}")


if __name__ == "__main__":
    run(main)
