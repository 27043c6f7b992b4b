"""
Checkout orchestrator — at-most-once checkout per cart.

    checkout(user_id)                       [inside the user's sequencer slot]
         │
         ├── no cart ──────────────→ failed "Cart not found or already checked out"
         ├── COMPLETED ────────────→ cached result (no external calls)
         ├── IN_PROGRESS < grace ──→ failed "Checkout already in progress"
         ├── no items ─────────────→ failed "Cannot checkout an empty cart"
         ▼
    IN_PROGRESS (persisted)
         │
         ▼
    tax breakdown
         │
         ▼
    sync(fresh=True) → verify remote == local
         │
         ▼
    provider.checkout ── Error ──→ FAILED (retryable)
         │
         ▼
    COMPLETED + cached result (persisted)
         │
         ▼
    delete cart & session handle (best-effort)

The COMPLETED record is written before cleanup. If cleanup fails the cart
stays COMPLETED and a repeat call replays the cached result instead of
charging again. Nothing that can raise runs between a successful provider
checkout and the COMPLETED transition.
"""

from __future__ import annotations

from datetime import datetime

from kungfu import Error, Ok

from cartsync._errors import Messages
from cartsync._logging import get_logger, log_context
from cartsync._policy import CartPolicy
from cartsync._types import (
    Cart,
    CheckoutResult,
    CheckoutStatus,
    LineItem,
    SyncStatus,
    TaxBreakdown,
    TaxContext,
    utcnow,
)
from cartsync.checkout._machine import can_transition, transition
from cartsync.provider._types import CommerceProvider, guarded
from cartsync.sequencer._sequencer import OperationSequencer
from cartsync.store._cart import CartStore
from cartsync.store._session import SessionStore
from cartsync.sync._reconciler import Reconciler
from cartsync.tax._calculator import TaxCalculator

logger = get_logger(__name__)


class CheckoutOrchestrator:
    def __init__(
        self,
        carts: CartStore,
        sessions: SessionStore,
        sequencer: OperationSequencer[str],
        reconciler: Reconciler,
        provider: CommerceProvider,
        tax: TaxCalculator,
        policy: CartPolicy | None = None,
    ) -> None:
        self.carts = carts
        self.sessions = sessions
        self.sequencer = sequencer
        self.reconciler = reconciler
        self.provider = provider
        self.tax = tax
        self.policy = policy or CartPolicy()

    async def checkout(self, user_id: str) -> CheckoutResult:
        """Serialized checkout. Never raises."""
        with log_context(user_id=user_id):
            return await self.sequencer.enqueue(user_id, lambda: self.attempt(user_id))

    async def attempt(self, user_id: str) -> CheckoutResult:
        """
        Checkout body without sequencing.

        Note: callers must already hold the user's sequencer slot.
        """
        now = utcnow()
        cart = await self.carts.get(user_id)
        if cart is None:
            return CheckoutResult.failed(user_id, Messages.CART_NOT_FOUND)

        match cart.checkout_status:
            case CheckoutStatus.COMPLETED:
                if cart.checkout_result is not None:
                    logger.info("Returning cached checkout result", user_id=user_id)
                    return cart.checkout_result
                return CheckoutResult.failed(user_id, Messages.ALREADY_CHECKED_OUT)
            case CheckoutStatus.IN_PROGRESS:
                if not can_transition(cart, CheckoutStatus.IN_PROGRESS, now, self.policy.checkout_grace):
                    return CheckoutResult.failed(user_id, Messages.CHECKOUT_IN_PROGRESS)
                logger.warning(
                    "Taking over abandoned checkout",
                    user_id=user_id,
                    started_at=cart.checkout_started_at.isoformat() if cart.checkout_started_at else None,
                )
            case _:
                pass

        if not cart.items:
            return CheckoutResult.failed(user_id, Messages.EMPTY_CART)

        items = tuple(cart.items)
        try:
            return await self._run(cart, items, now)
        except Exception as exc:
            logger.exception("Checkout crashed", user_id=user_id, error=str(exc))
            return await self._abort(cart, str(exc) or Messages.UNKNOWN_ERROR, items)

    # ═══════════════════════════════════════════════════════════════════════════
    # Steps
    # ═══════════════════════════════════════════════════════════════════════════

    async def _run(self, cart: Cart, items: tuple[LineItem, ...], now: datetime) -> CheckoutResult:
        user_id = cart.user_id
        transition(cart, CheckoutStatus.IN_PROGRESS, now, grace=self.policy.checkout_grace)
        await self.carts.update(user_id, cart)
        logger.info("Checkout started", user_id=user_id, items=len(items))

        # Everything that can fail locally runs before the provider charges
        breakdown = await self.tax.compute(items, self._context(cart))

        match await self.reconciler.sync(cart, fresh=True):
            case Ok(handle):
                pass
            case Error(err):
                return await self._fail(cart, err.message, items, breakdown)

        match await self.reconciler.verify(cart, handle):
            case Error(problem):
                cart.sync_status = SyncStatus.FAILED
                cart.last_sync_error = problem
                return await self._fail(cart, problem, items, breakdown)
            case _:
                pass

        match await guarded(lambda: self.provider.checkout(handle.session_id)):
            case Ok(order):
                pass
            case Error(err):
                message = err.message or Messages.PROVIDER_CHECKOUT_FAILED
                return await self._fail(cart, message, items, breakdown)

        result = CheckoutResult(
            user_id=user_id,
            status=CheckoutStatus.COMPLETED,
            subtotal=breakdown.subtotal,
            tax_lines=breakdown.lines,
            total_tax=breakdown.total_tax,
            total=breakdown.total,
            items=order.items,
            order_id=order.order_id,
            completed_at=order.completed_at,
        )
        transition(cart, CheckoutStatus.COMPLETED, utcnow(), result=result)
        await self.carts.update(user_id, cart)
        logger.info("Checkout completed", user_id=user_id, order_id=order.order_id, total=str(result.total))

        await self._cleanup(user_id)
        return result

    async def _fail(
        self,
        cart: Cart,
        message: str,
        items: tuple[LineItem, ...],
        breakdown: TaxBreakdown,
    ) -> CheckoutResult:
        transition(cart, CheckoutStatus.FAILED, utcnow(), error=message)
        await self.carts.update(cart.user_id, cart)
        logger.warning("Checkout failed", user_id=cart.user_id, error=message)
        return CheckoutResult.failed(cart.user_id, message, items=items, breakdown=breakdown)

    async def _abort(self, cart: Cart, message: str, items: tuple[LineItem, ...]) -> CheckoutResult:
        # Once the provider has charged, the cart never goes back to a retryable state
        if cart.checkout_result is not None:
            return cart.checkout_result

        if can_transition(cart, CheckoutStatus.FAILED, utcnow()):
            transition(cart, CheckoutStatus.FAILED, utcnow(), error=message)
            try:
                await self.carts.set(cart.user_id, cart)
            except Exception as exc:
                logger.error("Could not persist failed checkout", user_id=cart.user_id, error=str(exc))
        return CheckoutResult.failed(cart.user_id, message, items=items)

    async def _cleanup(self, user_id: str) -> None:
        try:
            await self.carts.delete(user_id)
            await self.sessions.delete(user_id)
        except Exception as exc:
            logger.error("Checkout cleanup failed", user_id=user_id, error=str(exc))

    def _context(self, cart: Cart) -> TaxContext:
        return cart.tax_context or TaxContext(self.policy.default_jurisdiction)


__all__ = ("CheckoutOrchestrator",)
