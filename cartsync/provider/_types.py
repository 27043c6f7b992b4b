"""
Commerce provider protocol — the remote cart capability.

All methods return Result; none is expected to raise. guarded() covers
implementations that break that promise.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum, auto
from typing import Protocol

from combinators import lift as L
from kungfu import Error, Ok, Result

from cartsync._errors import Messages
from cartsync._types import LineItem, RemoteCart, SessionHandle


# ═══════════════════════════════════════════════════════════════════════════════
# Provider Error
# ═══════════════════════════════════════════════════════════════════════════════


class ProviderErrorKind(Enum):
    SESSION_EXPIRED = auto()  # Unknown or timed-out session; recreate it
    UNAVAILABLE = auto()  # Transient; retry later
    REJECTED = auto()  # Provider refused the request (e.g. empty cart)
    UNEXPECTED = auto()  # Implementation raised instead of returning Error


@dataclass(frozen=True, slots=True)
class ProviderError:
    kind: ProviderErrorKind
    message: str
    cause: Exception | None = None

    @property
    def session_expired(self) -> bool:
        return self.kind is ProviderErrorKind.SESSION_EXPIRED

    @classmethod
    def expired(cls, session_id: str) -> ProviderError:
        return cls(ProviderErrorKind.SESSION_EXPIRED, Messages.session_expired(session_id))

    @classmethod
    def unexpected(cls, exc: Exception) -> ProviderError:
        return cls(ProviderErrorKind.UNEXPECTED, str(exc) or Messages.UNKNOWN_ERROR, exc)


@dataclass(frozen=True, slots=True)
class ProviderOrder:
    """Provider's record of a completed remote checkout."""

    order_id: str
    user_id: str
    items: tuple[LineItem, ...]
    total: Decimal
    completed_at: datetime


# ═══════════════════════════════════════════════════════════════════════════════
# CommerceProvider Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class CommerceProvider(Protocol):
    """
    Remote cart session capability.

    Example — HTTP adapter:

        class HttpProvider:
            async def get_session(self, session_id: str) -> Result[RemoteCart, ProviderError]:
                resp = await self.client.get(f"/carts/{session_id}")
                if resp.status_code == 404:
                    return Error(ProviderError.expired(session_id))
                return Ok(to_remote_cart(resp.json()))

            # ... other methods
    """

    @property
    def name(self) -> str: ...

    async def create_session(
        self, user_id: str, items: Sequence[LineItem]
    ) -> Result[SessionHandle, ProviderError]:
        """Open a remote session seeded with items."""
        ...

    async def add_item(self, session_id: str, item: LineItem) -> Result[None, ProviderError]:
        """Add or replace the line with item.product_id."""
        ...

    async def remove_item(self, session_id: str, product_id: str) -> Result[None, ProviderError]:
        """Remove the line; no-op when absent."""
        ...

    async def get_session(self, session_id: str) -> Result[RemoteCart, ProviderError]:
        """Current remote items. SESSION_EXPIRED when unknown or timed out."""
        ...

    async def validate_session(self, session_id: str) -> Result[bool, ProviderError]: ...

    async def checkout(self, session_id: str) -> Result[ProviderOrder, ProviderError]:
        """Place the order. Failures are returned, never raised."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# guarded() — Flatten raised exceptions into Error
# ═══════════════════════════════════════════════════════════════════════════════


async def guarded[T](
    call: Callable[[], Awaitable[Result[T, ProviderError]]],
) -> Result[T, ProviderError]:
    """
    Await a provider call, converting a raised exception to UNEXPECTED.

    Example:
        result = await guarded(lambda: provider.get_session(sid))
    """
    outcome = await L.catching_async(call, on_error=ProviderError.unexpected)
    match outcome:
        case Ok(result):
            return result
        case Error(err):
            return Error(err)


__all__ = (
    "ProviderErrorKind",
    "ProviderError",
    "ProviderOrder",
    "CommerceProvider",
    "guarded",
)
