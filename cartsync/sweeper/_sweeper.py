"""
Cleanup sweeper — periodic eviction of terminal, stuck, and idle carts.

Per cart, first matching rule wins:

    COMPLETED                               → delete cart + session handle
    FAILED older than failed_retention      → delete cart + session handle
    IN_PROGRESS older than stuck timeout    → FAILED "Checkout timeout - please retry"
    last access older than inactive TTL     → delete cart + session handle

Then dead session handles are dropped on their own clock.

Note: runs outside the per-user sequencer. Best-effort: a failure on one
cart is logged and the pass moves on.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime

from cartsync._errors import Messages
from cartsync._logging import get_logger
from cartsync._policy import CartPolicy
from cartsync._types import Cart, CheckoutStatus, utcnow
from cartsync.checkout._machine import transition
from cartsync.store._cart import CartStore
from cartsync.store._session import SessionStore

logger = get_logger(__name__)


@dataclass(slots=True)
class SweepReport:
    deleted: list[str] = field(default_factory=list)
    timed_out: list[str] = field(default_factory=list)
    sessions_removed: int = 0
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def touched(self) -> int:
        return len(self.deleted) + len(self.timed_out) + self.sessions_removed


class CleanupSweeper:
    """
    Example:
        sweeper = CleanupSweeper(carts, sessions, policy)
        sweeper.start()          # sweeps now, then every sweep_interval
        ...
        await sweeper.stop()

        report = await sweeper.run_once()
    """

    def __init__(
        self,
        carts: CartStore,
        sessions: SessionStore,
        policy: CartPolicy | None = None,
    ) -> None:
        self.carts = carts
        self.sessions = sessions
        self.policy = policy or CartPolicy()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ═══════════════════════════════════════════════════════════════════════════
    # Lifecycle
    # ═══════════════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.running:
            logger.warning("Cleanup sweeper already running")
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.info(
            "Cleanup sweeper started",
            interval_seconds=self.policy.sweep_interval.total_seconds(),
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Cleanup sweeper stopped")

    async def _loop(self) -> None:
        interval = self.policy.sweep_interval.total_seconds()
        while True:
            try:
                await self.run_once()
            except Exception as exc:
                logger.exception("Cleanup sweep failed", error=str(exc))
            await asyncio.sleep(interval)

    # ═══════════════════════════════════════════════════════════════════════════
    # Sweep
    # ═══════════════════════════════════════════════════════════════════════════

    async def run_once(self, now: datetime | None = None) -> SweepReport:
        """One full pass over carts, then session handles."""
        now = now or utcnow()
        report = SweepReport()

        for user_id, cart in await self.carts.snapshot():
            try:
                await self._sweep_cart(user_id, cart, now, report)
            except Exception as exc:
                report.errors[user_id] = str(exc)
                logger.error("Failed to sweep cart", user_id=user_id, error=str(exc))

        for user_id, handle in await self.sessions.snapshot():
            if handle.is_live(now):
                continue
            if await self.sessions.delete(user_id):
                report.sessions_removed += 1

        if report.touched or report.errors:
            logger.info(
                "Cleaned up carts",
                deleted=len(report.deleted),
                timed_out=len(report.timed_out),
                sessions=report.sessions_removed,
                errors=len(report.errors),
            )
        return report

    async def _sweep_cart(self, user_id: str, cart: Cart, now: datetime, report: SweepReport) -> None:
        policy = self.policy

        match cart.checkout_status:
            case CheckoutStatus.COMPLETED:
                await self._evict(user_id, report)
                return
            case CheckoutStatus.FAILED:
                started = cart.checkout_started_at or cart.updated_at
                if now - started > policy.failed_retention:
                    await self._evict(user_id, report)
                return
            case CheckoutStatus.IN_PROGRESS:
                started = cart.checkout_started_at or cart.updated_at
                if now - started > policy.stuck_checkout_timeout:
                    transition(cart, CheckoutStatus.FAILED, now, error=Messages.CHECKOUT_TIMEOUT)
                    await self.carts.set(user_id, cart)
                    report.timed_out.append(user_id)
                    logger.warning("Timed out stuck checkout", user_id=user_id)
                return
            case _:
                pass

        if now - cart.last_accessed_at > policy.inactive_cart_ttl:
            await self._evict(user_id, report)

    async def _evict(self, user_id: str, report: SweepReport) -> None:
        await self.carts.delete(user_id)
        await self.sessions.delete(user_id)
        report.deleted.append(user_id)


__all__ = ("SweepReport", "CleanupSweeper")
