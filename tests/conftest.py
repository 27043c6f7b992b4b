"""Shared fixtures and fault-injecting fakes."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest
from kungfu import Error, Ok, Result

from cartsync import CartService, CheckoutStatus, LineItem, ProductType
from cartsync.provider import MemoryCommerceProvider, ProviderError, ProviderErrorKind, ProviderOrder
from cartsync.store import CartStore
from cartsync.tax import RateTableTaxCalculator
from cartsync._types import RemoteCart


def item(
    product_id: str = "phone-1",
    price: str = "999.99",
    quantity: int = 1,
    product_type: str = "device",
    name: str | None = None,
) -> dict[str, Any]:
    return {
        "product_id": product_id,
        "name": name or product_id.title(),
        "product_type": product_type,
        "quantity": quantity,
        "unit_price": price,
    }


def line(
    product_id: str = "phone-1",
    price: str = "999.99",
    quantity: int = 1,
    product_type: ProductType = ProductType.DEVICE,
) -> LineItem:
    return LineItem(product_id, product_id.title(), product_type, quantity, Decimal(price))


# ═══════════════════════════════════════════════════════════════════════════════
# Fakes
# ═══════════════════════════════════════════════════════════════════════════════


class ExpireOnReadProvider(MemoryCommerceProvider):
    """Session validates fine, then is gone by the time it is read."""

    def __init__(self) -> None:
        super().__init__()
        self.armed = False

    async def get_session(self, session_id: str) -> Result[RemoteCart, ProviderError]:
        if self.armed:
            self.expire_session(session_id)
            return Error(ProviderError.expired(session_id))
        return await super().get_session(session_id)


class FlakyCheckoutProvider(MemoryCommerceProvider):
    """Checkout returns UNAVAILABLE while failures remain."""

    def __init__(self, failures: int = 1, message: str = "Payment gateway unavailable") -> None:
        super().__init__()
        self.failures = failures
        self.message = message

    async def checkout(self, session_id: str) -> Result[ProviderOrder, ProviderError]:
        if self.failures > 0:
            self.failures -= 1
            self.checkout_calls += 1
            return Error(ProviderError(ProviderErrorKind.UNAVAILABLE, self.message))
        return await super().checkout(session_id)


class RaisingCheckoutProvider(MemoryCommerceProvider):
    async def checkout(self, session_id: str) -> Result[ProviderOrder, ProviderError]:
        self.checkout_calls += 1
        raise RuntimeError("connection reset")


class LossyProvider(MemoryCommerceProvider):
    """Remote reads always lose the last line."""

    async def get_session(self, session_id: str) -> Result[RemoteCart, ProviderError]:
        match await super().get_session(session_id):
            case Ok(remote):
                return Ok(RemoteCart(remote.remote_cart_id, remote.items[:-1]))
            case Error(err):
                return Error(err)


class UnavailableProvider(MemoryCommerceProvider):
    async def create_session(self, user_id, items):
        return Error(ProviderError(ProviderErrorKind.UNAVAILABLE, "Provider offline"))


class TaxOutageOnce(RateTableTaxCalculator):
    """First computation fails, later ones succeed."""

    def __init__(self) -> None:
        super().__init__()
        self.failed = False

    async def compute(self, items, context):
        if not self.failed:
            self.failed = True
            raise RuntimeError("tax service down")
        return await super().compute(items, context)


class CompletedWriteFailsCartStore(CartStore):
    """Persisting a completed checkout fails once the order is placed."""

    async def update(self, user_id, cart, now=None):
        if cart.checkout_status is CheckoutStatus.COMPLETED:
            raise RuntimeError("disk full")
        await super().update(user_id, cart, now)


class FailingDeleteCartStore(CartStore):
    """Simulates a crash between the provider checkout and local cleanup."""

    async def delete(self, user_id: str) -> bool:
        raise RuntimeError("store unavailable")


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def provider() -> MemoryCommerceProvider:
    return MemoryCommerceProvider()


@pytest.fixture
def service(provider: MemoryCommerceProvider) -> CartService:
    return CartService(provider)
