"""Diffing and reconciliation against the remote session."""

from __future__ import annotations

from kungfu import Error, Ok

from cartsync import Cart, SyncStatus
from cartsync.provider import MemoryCommerceProvider
from cartsync.store import SessionStore
from cartsync.sync import Reconciler, mismatch, plan

from conftest import ExpireOnReadProvider, UnavailableProvider, line


def test_plan_adds_missing_and_changed_quantities() -> None:
    local = [line("a", quantity=1), line("b", quantity=2), line("c")]
    remote = [line("a", quantity=1), line("b", quantity=5), line("z")]

    steps = plan(local, remote)

    assert [i.product_id for i in steps.to_add] == ["b", "c"]
    assert steps.to_remove == ("z",)


def test_plan_empty_when_equal() -> None:
    items = [line("a"), line("b", quantity=3)]
    assert plan(items, list(reversed(items))).empty


def test_mismatch_messages() -> None:
    assert mismatch([line("a")], [line("a")]) is None
    assert mismatch([line("a")], []) == "Cart sync validation failed: item count mismatch"
    assert mismatch([line("a", quantity=2)], [line("a")]) == "Cart sync validation failed: item mismatch"


async def test_sync_creates_session_and_marks_synced(provider: MemoryCommerceProvider) -> None:
    sessions = SessionStore()
    reconciler = Reconciler(provider, sessions)
    cart = Cart.new("u1")
    cart.upsert(line("a"))

    match await reconciler.sync(cart):
        case Ok(handle):
            assert cart.session_id == handle.session_id
        case Error(err):
            raise AssertionError(err)

    assert cart.sync_status is SyncStatus.SYNCED
    assert cart.last_synced_at is not None
    assert await sessions.get("u1") == handle
    assert [i.product_id for i in provider.items_of(handle.session_id)] == ["a"]


async def test_sync_replays_onto_existing_session(provider: MemoryCommerceProvider) -> None:
    reconciler = Reconciler(provider, SessionStore())
    cart = Cart.new("u1")
    cart.upsert(line("a"))
    cart.upsert(line("b"))
    first = await reconciler.sync(cart)

    cart.discard("a")
    cart.upsert(line("b", quantity=4))
    second = await reconciler.sync(cart)

    assert isinstance(first, Ok) and isinstance(second, Ok)
    assert cart.session_id is not None
    assert provider.session_count == 1
    remote = provider.items_of(cart.session_id)
    assert [(i.product_id, i.quantity) for i in remote] == [("b", 4)]


async def test_sync_recreates_invalid_session(provider: MemoryCommerceProvider) -> None:
    reconciler = Reconciler(provider, SessionStore())
    cart = Cart.new("u1")
    cart.upsert(line("a"))
    await reconciler.sync(cart)
    stale = cart.session_id
    assert stale is not None
    provider.expire_session(stale)

    await reconciler.sync(cart)

    assert cart.session_id != stale
    assert cart.sync_status is SyncStatus.SYNCED
    assert [i.product_id for i in provider.items_of(cart.session_id)] == ["a"]


async def test_expired_read_degrades_to_pending() -> None:
    provider = ExpireOnReadProvider()
    sessions = SessionStore()
    reconciler = Reconciler(provider, sessions)
    cart = Cart.new("u1")
    cart.upsert(line("a"))
    await reconciler.sync(cart)

    provider.armed = True
    cart.upsert(line("b"))
    result = await reconciler.sync(cart)

    assert isinstance(result, Error)
    assert cart.sync_status is SyncStatus.PENDING
    assert cart.last_sync_error
    assert await sessions.get("u1") is None
    assert cart.session_id is None


async def test_provider_outage_never_raises() -> None:
    reconciler = Reconciler(UnavailableProvider(), SessionStore())
    cart = Cart.new("u1")
    cart.upsert(line("a"))

    match await reconciler.sync(cart):
        case Error(err):
            assert err.message == "Provider offline"
        case Ok(_):
            raise AssertionError("expected failure")

    assert cart.sync_status is SyncStatus.PENDING
    assert cart.last_sync_error == "Provider offline"
