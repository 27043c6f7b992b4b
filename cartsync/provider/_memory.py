"""
In-memory commerce provider — a faithful stand-in for a remote platform.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from kungfu import Error, Ok, Result

from cartsync._errors import Messages
from cartsync._types import LineItem, RemoteCart, SessionHandle, utcnow
from cartsync.provider._types import ProviderError, ProviderErrorKind, ProviderOrder


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


@dataclass
class _RemoteSession:
    """Internal mutable session record."""

    session_id: str
    remote_cart_id: str
    user_id: str
    items: list[LineItem]
    created_at: datetime
    expires_at: datetime


class MemoryCommerceProvider:
    """
    Simulated remote cart platform.

    Sessions expire after `lifetime`; a checked-out session is discarded.
    `latency` inserts a suspension point into every call.

    Note: for tests and demos.
    """

    def __init__(
        self,
        lifetime: timedelta = timedelta(minutes=30),
        latency: float = 0.0,
        name: str = "memory",
    ) -> None:
        self._sessions: dict[str, _RemoteSession] = {}
        self._lifetime = lifetime
        self._latency = latency
        self._name = name
        self.checkout_calls = 0

    @property
    def name(self) -> str:
        return self._name

    async def create_session(
        self, user_id: str, items: Sequence[LineItem]
    ) -> Result[SessionHandle, ProviderError]:
        await asyncio.sleep(self._latency)
        now = utcnow()
        session = _RemoteSession(
            session_id=_new_id("ctx"),
            remote_cart_id=_new_id("cart"),
            user_id=user_id,
            items=list(items),
            created_at=now,
            expires_at=now + self._lifetime,
        )
        self._sessions[session.session_id] = session

        return Ok(
            SessionHandle(
                session_id=session.session_id,
                remote_cart_id=session.remote_cart_id,
                provider=self._name,
                created_at=now,
                expires_at=session.expires_at,
            )
        )

    async def add_item(self, session_id: str, item: LineItem) -> Result[None, ProviderError]:
        match await self._live(session_id):
            case Ok(session):
                for index, existing in enumerate(session.items):
                    if existing.product_id == item.product_id:
                        session.items[index] = item
                        break
                else:
                    session.items.append(item)
                return Ok(None)
            case Error(err):
                return Error(err)

    async def remove_item(self, session_id: str, product_id: str) -> Result[None, ProviderError]:
        match await self._live(session_id):
            case Ok(session):
                session.items = [i for i in session.items if i.product_id != product_id]
                return Ok(None)
            case Error(err):
                return Error(err)

    async def get_session(self, session_id: str) -> Result[RemoteCart, ProviderError]:
        match await self._live(session_id):
            case Ok(session):
                return Ok(RemoteCart(session.remote_cart_id, tuple(session.items)))
            case Error(err):
                return Error(err)

    async def validate_session(self, session_id: str) -> Result[bool, ProviderError]:
        match await self._live(session_id):
            case Ok(_):
                return Ok(True)
            case Error(_):
                return Ok(False)

    async def checkout(self, session_id: str) -> Result[ProviderOrder, ProviderError]:
        self.checkout_calls += 1
        match await self._live(session_id):
            case Ok(session):
                if not session.items:
                    return Error(ProviderError(ProviderErrorKind.REJECTED, Messages.EMPTY_CART))

                del self._sessions[session_id]
                return Ok(
                    ProviderOrder(
                        order_id=_new_id("order"),
                        user_id=session.user_id,
                        items=tuple(session.items),
                        total=sum((i.line_total for i in session.items), Decimal("0")),
                        completed_at=utcnow(),
                    )
                )
            case Error(err):
                return Error(err)

    # ───────────────────────────────────────────────────────────────────────────
    # Helpers
    # ───────────────────────────────────────────────────────────────────────────

    async def _live(self, session_id: str) -> Result[_RemoteSession, ProviderError]:
        await asyncio.sleep(self._latency)
        session = self._sessions.get(session_id)
        if session is None:
            return Error(ProviderError.expired(session_id))

        if utcnow() >= session.expires_at:
            del self._sessions[session_id]
            return Error(ProviderError.expired(session_id))

        return Ok(session)

    def expire_session(self, session_id: str) -> None:
        """Force a session past its expiry."""
        session = self._sessions.get(session_id)
        if session is not None:
            session.expires_at = utcnow() - timedelta(seconds=1)

    def items_of(self, session_id: str) -> list[LineItem]:
        """Inspect remote items without expiry checks."""
        session = self._sessions.get(session_id)
        return list(session.items) if session else []

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def clear(self) -> None:
        self._sessions.clear()
        self.checkout_calls = 0


__all__ = ("MemoryCommerceProvider",)
