"""
Sweeper Example — stuck checkouts recover, idle carts disappear.

Run: uv run python examples/sweeper_example.py
"""

from datetime import timedelta

from cartsync import CartPolicy, CartService, CheckoutStatus
from cartsync._types import utcnow
from cartsync.checkout import transition
from cartsync.provider import MemoryCommerceProvider
from examples._infra import banner, item, run


async def main() -> None:
    banner("Sweeper")

    policy = CartPolicy().with_stuck_checkout_timeout(minutes=5).with_inactive_ttl(hours=24)
    provider = MemoryCommerceProvider(lifetime=policy.session_lifetime)
    service = CartService(provider, policy=policy)

    await service.add_item("dave", item("router", "149.00"))
    await service.add_item("erin", item("cable", "9.99", "accessory"))

    # Simulate a checkout whose worker vanished six minutes ago
    cart = await service.carts.get("dave")
    transition(cart, CheckoutStatus.IN_PROGRESS, utcnow() - timedelta(minutes=6))

    print("\n1. Sweep:")
    report = await service.sweeper.run_once()
    print(f"   timed out: {report.timed_out}")
    print(f"   dave: {cart.checkout_status.value} ({cart.checkout_error})")

    print("\n2. Retry:")
    result = await service.checkout("dave")
    print(f"   ok={result.ok} order={result.order_id}")

    print("\n3. A day later:")
    report = await service.sweeper.run_once(now=utcnow() + timedelta(hours=25))
    print(f"   deleted: {report.deleted}, sessions removed: {report.sessions_removed}")


if __name__ == "__main__":
    run(main)
