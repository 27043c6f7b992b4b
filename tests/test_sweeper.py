"""Background cleanup rules."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from cartsync import CartPolicy, CartService, CheckoutResult, CheckoutStatus, SessionHandle
from cartsync._types import utcnow
from cartsync.checkout import transition
from cartsync.provider import MemoryCommerceProvider
from cartsync.sweeper import CleanupSweeper

from conftest import item


async def _cart_with_item(service: CartService, user_id: str = "u1"):
    await service.add_item(user_id, item())
    return await service.carts.get(user_id)


async def test_fresh_carts_survive(service: CartService) -> None:
    await _cart_with_item(service)

    report = await service.sweeper.run_once()

    assert report.deleted == []
    assert await service.carts.exists("u1")


async def test_completed_cart_is_removed(service: CartService) -> None:
    cart = await _cart_with_item(service)
    now = utcnow()
    transition(cart, CheckoutStatus.IN_PROGRESS, now)
    transition(cart, CheckoutStatus.COMPLETED, now, result=CheckoutResult("u1", CheckoutStatus.COMPLETED))

    report = await service.sweeper.run_once()

    assert report.deleted == ["u1"]
    assert not await service.carts.exists("u1")
    assert await service.sessions.get("u1") is None


async def test_failed_cart_kept_until_retention_elapses(service: CartService) -> None:
    cart = await _cart_with_item(service)
    started = utcnow()
    transition(cart, CheckoutStatus.IN_PROGRESS, started)
    transition(cart, CheckoutStatus.FAILED, started, error="declined")

    early = await service.sweeper.run_once(now=started + timedelta(minutes=30))
    late = await service.sweeper.run_once(now=started + timedelta(hours=1, seconds=1))

    assert early.deleted == []
    assert late.deleted == ["u1"]


async def test_stuck_checkout_recovered_then_retried(
    service: CartService, provider: MemoryCommerceProvider
) -> None:
    cart = await _cart_with_item(service)
    transition(cart, CheckoutStatus.IN_PROGRESS, utcnow() - timedelta(minutes=6))

    report = await service.sweeper.run_once()

    assert report.timed_out == ["u1"]
    assert cart.checkout_status is CheckoutStatus.FAILED
    assert cart.checkout_error == "Checkout timeout - please retry"
    assert await service.carts.exists("u1")

    result = await service.checkout("u1")

    assert result.ok
    assert provider.checkout_calls == 1


async def test_inactive_cart_evicted(service: CartService) -> None:
    await _cart_with_item(service)

    report = await service.sweeper.run_once(now=utcnow() + timedelta(hours=25))

    assert report.deleted == ["u1"]
    assert len(service.sessions) == 0


async def test_dead_session_handles_swept() -> None:
    service = CartService(MemoryCommerceProvider())
    now = utcnow()
    await service.sessions.set(
        "orphan", SessionHandle("ctx_x", "cart_x", "memory", now, now - timedelta(seconds=1))
    )

    report = await service.sweeper.run_once()

    assert report.sessions_removed == 1
    assert len(service.sessions) == 0


async def test_one_bad_cart_does_not_stop_the_pass(service: CartService) -> None:
    await _cart_with_item(service, "u1")
    await _cart_with_item(service, "u2")
    broken = await service.carts.get("u1")
    broken.last_accessed_at = None  # type: ignore[assignment]

    report = await service.sweeper.run_once(now=utcnow() + timedelta(hours=25))

    assert "u1" in report.errors
    assert report.deleted == ["u2"]


async def test_start_twice_and_stop() -> None:
    service = CartService(MemoryCommerceProvider())
    sweeper = CleanupSweeper(service.carts, service.sessions, CartPolicy().with_sweep_interval(seconds=60))

    await sweeper.stop()
    sweeper.start()
    sweeper.start()
    await asyncio.sleep(0)

    assert sweeper.running
    await sweeper.stop()
    assert not sweeper.running


def test_policy_rejects_non_positive_durations() -> None:
    with pytest.raises(ValueError):
        CartPolicy().with_sweep_interval(seconds=0)


async def test_start_sweeps_immediately(service: CartService) -> None:
    cart = await _cart_with_item(service)
    now = utcnow()
    transition(cart, CheckoutStatus.IN_PROGRESS, now)
    transition(cart, CheckoutStatus.COMPLETED, now, result=CheckoutResult("u1", CheckoutStatus.COMPLETED))
    sweeper = CleanupSweeper(service.carts, service.sessions, CartPolicy().with_sweep_interval(minutes=5))

    sweeper.start()
    try:
        async with asyncio.timeout(1):
            while await service.carts.exists("u1"):
                await asyncio.sleep(0)
    finally:
        await sweeper.stop()

    assert not await service.carts.exists("u1")
