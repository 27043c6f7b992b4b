"""In-memory commerce provider behaviour."""

from __future__ import annotations

from decimal import Decimal

from kungfu import Error, Ok

from cartsync.provider import MemoryCommerceProvider, ProviderErrorKind, guarded

from conftest import line


async def test_add_item_replaces_same_product(provider: MemoryCommerceProvider) -> None:
    match await provider.create_session("u1", [line(quantity=1)]):
        case Ok(handle):
            pass
        case Error(err):
            raise AssertionError(err)

    await provider.add_item(handle.session_id, line(quantity=3))

    items = provider.items_of(handle.session_id)
    assert [(i.product_id, i.quantity) for i in items] == [("phone-1", 3)]


async def test_remove_missing_item_is_noop(provider: MemoryCommerceProvider) -> None:
    match await provider.create_session("u1", []):
        case Ok(handle):
            result = await provider.remove_item(handle.session_id, "nope")
            assert isinstance(result, Ok)
        case Error(err):
            raise AssertionError(err)


async def test_unknown_session_is_expired(provider: MemoryCommerceProvider) -> None:
    match await provider.get_session("ctx_missing"):
        case Error(err):
            assert err.kind is ProviderErrorKind.SESSION_EXPIRED
            assert err.message == "External session expired: ctx_missing"
        case Ok(_):
            raise AssertionError("expected expiry")

    match await provider.validate_session("ctx_missing"):
        case Ok(valid):
            assert valid is False
        case Error(err):
            raise AssertionError(err)


async def test_expired_session_is_dropped_on_validate(provider: MemoryCommerceProvider) -> None:
    match await provider.create_session("u1", [line()]):
        case Ok(handle):
            provider.expire_session(handle.session_id)
        case Error(err):
            raise AssertionError(err)

    match await provider.validate_session(handle.session_id):
        case Ok(valid):
            assert valid is False
        case Error(err):
            raise AssertionError(err)
    assert provider.session_count == 0


async def test_checkout_consumes_session(provider: MemoryCommerceProvider) -> None:
    match await provider.create_session("u1", [line(quantity=2, price="10.00")]):
        case Ok(handle):
            pass
        case Error(err):
            raise AssertionError(err)

    match await provider.checkout(handle.session_id):
        case Ok(order):
            assert order.user_id == "u1"
            assert order.total == Decimal("20.00")
            assert order.order_id.startswith("order_")
        case Error(err):
            raise AssertionError(err)

    assert provider.session_count == 0
    assert provider.checkout_calls == 1


async def test_checkout_rejects_empty_session(provider: MemoryCommerceProvider) -> None:
    match await provider.create_session("u1", []):
        case Ok(handle):
            pass
        case Error(err):
            raise AssertionError(err)

    match await provider.checkout(handle.session_id):
        case Error(err):
            assert err.kind is ProviderErrorKind.REJECTED
            assert err.message == "Cannot checkout an empty cart"
        case Ok(_):
            raise AssertionError("expected rejection")


async def test_guarded_converts_raise_to_error() -> None:
    async def explode():
        raise RuntimeError("socket closed")

    match await guarded(explode):
        case Error(err):
            assert err.kind is ProviderErrorKind.UNEXPECTED
            assert err.message == "socket closed"
            assert isinstance(err.cause, RuntimeError)
        case Ok(_):
            raise AssertionError("expected error")
