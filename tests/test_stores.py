"""Cart and session stores."""

from __future__ import annotations

from datetime import timedelta

from cartsync import Cart, SessionHandle
from cartsync._types import utcnow
from cartsync.store import CartStore, SessionStore


def handle(session_id: str = "ctx_1", ttl: timedelta = timedelta(minutes=30)) -> SessionHandle:
    now = utcnow()
    return SessionHandle(session_id, "cart_1", "memory", now, now + ttl)


async def test_cart_update_bumps_timestamps() -> None:
    store = CartStore()
    cart = Cart.new("u1")
    await store.set("u1", cart)
    later = utcnow() + timedelta(minutes=5)

    await store.update("u1", cart, now=later)

    stored = await store.get("u1")
    assert stored is cart
    assert cart.updated_at == later
    assert cart.last_accessed_at == later


async def test_cart_delete_and_snapshot() -> None:
    store = CartStore()
    await store.set("u1", Cart.new("u1"))
    await store.set("u2", Cart.new("u2"))

    assert len(store) == 2
    assert await store.delete("u1")
    assert not await store.delete("u1")
    assert [user for user, _ in await store.snapshot()] == ["u2"]


async def test_session_expires_on_read() -> None:
    store = SessionStore()
    await store.set("u1", handle())

    assert await store.get("u1", now=utcnow() + timedelta(minutes=31)) is None
    assert len(store) == 0


async def test_session_invalidate_hides_handle() -> None:
    store = SessionStore()
    await store.set("u1", handle())

    assert await store.invalidate("u1")
    assert await store.get("u1") is None
    assert not await store.invalidate("u1")


async def test_session_snapshot_includes_dead_handles() -> None:
    store = SessionStore()
    await store.set("u1", handle())
    await store.set("u2", handle("ctx_2"))
    await store.invalidate("u2")

    entries = dict(await store.snapshot())

    assert entries["u1"].is_live()
    assert entries["u2"].expired
