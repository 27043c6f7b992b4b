"""
Reconciler — best-effort replay of the local cart onto the remote session.

    sync(cart)
         │
         ▼
    obtain handle ── stored & validate_session → Ok(True)? ── reuse
         │                                      otherwise ── create_session(items)
         ▼
    get_session → plan(local, remote)
         │
         ▼
    remove_item* → add_item*
         │
         ├── Ok    → SYNCED, last_synced_at, error cleared
         └── Error → PENDING, last_sync_error (expired handle invalidated)

The local cart is the source of truth. sync() never raises and never
fails the caller's mutation.
"""

from __future__ import annotations

from kungfu import Error, Ok, Result

from cartsync._logging import get_logger
from cartsync._types import Cart, SessionHandle, SyncStatus, utcnow
from cartsync.provider._types import CommerceProvider, ProviderError, guarded
from cartsync.store._session import SessionStore
from cartsync.sync._diff import mismatch, plan

logger = get_logger(__name__)


class Reconciler:
    def __init__(self, provider: CommerceProvider, sessions: SessionStore) -> None:
        self.provider = provider
        self.sessions = sessions

    # ═══════════════════════════════════════════════════════════════════════════
    # Public
    # ═══════════════════════════════════════════════════════════════════════════

    async def sync(self, cart: Cart, fresh: bool = False) -> Result[SessionHandle, ProviderError]:
        """
        Make the remote session match cart.items and record the outcome on cart.

        fresh=True discards any stored handle and seeds a new session
        from the full local item list.
        """
        result = await self._replay(cart, fresh)

        match result:
            case Ok(_):
                cart.sync_status = SyncStatus.SYNCED
                cart.last_synced_at = utcnow()
                cart.last_sync_error = None
            case Error(err):
                cart.sync_status = SyncStatus.PENDING
                cart.last_sync_error = err.message
                if err.session_expired:
                    await self.sessions.invalidate(cart.user_id)
                    cart.session_id = None
                logger.warning(
                    "Cart sync failed",
                    user_id=cart.user_id,
                    kind=err.kind.name,
                    error=err.message,
                )

        return result

    async def verify(self, cart: Cart, handle: SessionHandle) -> Result[None, str]:
        """Strict check that the remote items equal the local ones."""
        match await guarded(lambda: self.provider.get_session(handle.session_id)):
            case Ok(remote):
                problem = mismatch(cart.items, remote.items)
                if problem is not None:
                    return Error(problem)
                return Ok(None)
            case Error(err):
                return Error(err.message)

    # ═══════════════════════════════════════════════════════════════════════════
    # Steps
    # ═══════════════════════════════════════════════════════════════════════════

    async def _replay(self, cart: Cart, fresh: bool) -> Result[SessionHandle, ProviderError]:
        match await self._obtain(cart, fresh):
            case Ok(handle):
                pass
            case Error(err):
                return Error(err)

        match await guarded(lambda: self.provider.get_session(handle.session_id)):
            case Ok(remote):
                steps = plan(cart.items, remote.items)
            case Error(err):
                return Error(err)

        for product_id in steps.to_remove:
            match await guarded(
                lambda pid=product_id: self.provider.remove_item(handle.session_id, pid)
            ):
                case Error(err):
                    return Error(err)
                case _:
                    pass

        for item in steps.to_add:
            match await guarded(lambda it=item: self.provider.add_item(handle.session_id, it)):
                case Error(err):
                    return Error(err)
                case _:
                    pass

        if not steps.empty:
            logger.debug(
                "Replayed cart onto session",
                user_id=cart.user_id,
                added=len(steps.to_add),
                removed=len(steps.to_remove),
            )

        return Ok(handle)

    async def _obtain(self, cart: Cart, fresh: bool) -> Result[SessionHandle, ProviderError]:
        if not fresh:
            existing = await self.sessions.get(cart.user_id)
            if existing is not None:
                match await guarded(lambda: self.provider.validate_session(existing.session_id)):
                    case Ok(True):
                        cart.session_id = existing.session_id
                        return Ok(existing)
                    case Ok(False):
                        logger.info(
                            "Remote session no longer valid",
                            user_id=cart.user_id,
                            session_id=existing.session_id,
                        )
                    case Error(err):
                        return Error(err)

        items = tuple(cart.items)
        match await guarded(lambda: self.provider.create_session(cart.user_id, items)):
            case Ok(handle):
                await self.sessions.set(cart.user_id, handle)
                cart.session_id = handle.session_id
                logger.info(
                    "Created remote session",
                    user_id=cart.user_id,
                    session_id=handle.session_id,
                )
                return Ok(handle)
            case Error(err):
                return Error(err)


__all__ = ("Reconciler",)
