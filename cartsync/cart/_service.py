"""
Cart service — the caller-facing API.

Every call runs inside the user's sequencer slot, so one user's operations
apply strictly in submission order while other users proceed in parallel.
Mutations are local-first: the cart is updated and stored, then replayed
onto the remote session. A failed replay only degrades sync_status.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from cartsync._errors import CartNotFoundError, CheckoutConflictError, ItemNotFoundError
from cartsync._logging import get_logger, log_context
from cartsync._policy import CartPolicy
from cartsync._types import (
    Cart,
    CheckoutResult,
    CheckoutStatus,
    LineItem,
    SyncStatus,
    TaxContext,
    TaxLine,
    utcnow,
)
from cartsync.cart._validate import validate_item, validate_quantity
from cartsync.checkout._orchestrator import CheckoutOrchestrator
from cartsync.provider._types import CommerceProvider
from cartsync.sequencer._sequencer import OperationSequencer, Task
from cartsync.store._cart import CartStore
from cartsync.store._session import SessionStore
from cartsync.sweeper._sweeper import CleanupSweeper
from cartsync.sync._reconciler import Reconciler
from cartsync.tax._calculator import RateTableTaxCalculator, TaxCalculator

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CartSummary:
    user_id: str
    items: tuple[LineItem, ...]
    item_count: int
    subtotal: Decimal
    tax_lines: tuple[TaxLine, ...]
    total_tax: Decimal
    total: Decimal
    jurisdiction: str
    sync_status: SyncStatus
    checkout_status: CheckoutStatus


class CartService:
    """
    Example:
        service = CartService(MemoryCommerceProvider())
        service.sweeper.start()

        await service.add_item("user-1", {
            "product_id": "phone-1",
            "name": "Phone",
            "product_type": "device",
            "quantity": 1,
            "unit_price": "999.99",
        })
        summary = await service.get_summary("user-1")
        result = await service.checkout("user-1")
    """

    def __init__(
        self,
        provider: CommerceProvider,
        *,
        carts: CartStore | None = None,
        sessions: SessionStore | None = None,
        sequencer: OperationSequencer[str] | None = None,
        tax: TaxCalculator | None = None,
        policy: CartPolicy | None = None,
    ) -> None:
        self.provider = provider
        self.carts = carts or CartStore()
        self.sessions = sessions or SessionStore()
        self.sequencer = sequencer or OperationSequencer[str]()
        self.tax = tax or RateTableTaxCalculator()
        self.policy = policy or CartPolicy()

        self.reconciler = Reconciler(provider, self.sessions)
        self.orchestrator = CheckoutOrchestrator(
            self.carts,
            self.sessions,
            self.sequencer,
            self.reconciler,
            provider,
            self.tax,
            self.policy,
        )
        self.sweeper = CleanupSweeper(self.carts, self.sessions, self.policy)

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_cart(self, user_id: str) -> Cart:
        """Current cart, created empty on first access."""

        async def run() -> Cart:
            cart = await self._load(user_id)
            cart.last_accessed_at = utcnow()
            return cart

        return await self._serial(user_id, run)

    async def get_summary(self, user_id: str) -> CartSummary:
        async def run() -> CartSummary:
            cart = await self._load(user_id)
            context = self._context(cart)
            breakdown = await self.tax.compute(cart.items, context)
            return CartSummary(
                user_id=user_id,
                items=tuple(cart.items),
                item_count=cart.item_count,
                subtotal=breakdown.subtotal,
                tax_lines=breakdown.lines,
                total_tax=breakdown.total_tax,
                total=breakdown.total,
                jurisdiction=context.jurisdiction,
                sync_status=cart.sync_status,
                checkout_status=cart.checkout_status,
            )

        return await self._serial(user_id, run)

    # ═══════════════════════════════════════════════════════════════════════════
    # Mutations
    # ═══════════════════════════════════════════════════════════════════════════

    async def add_item(self, user_id: str, item: LineItem | Mapping[str, Any]) -> Cart:
        """Add a line, replacing any line with the same product id."""
        line = validate_item(item)

        async def run() -> Cart:
            cart = await self._load(user_id)
            self._ensure_mutable(cart)
            cart.upsert(line)
            return await self._commit(cart)

        return await self._serial(user_id, run)

    async def update_item_quantity(self, user_id: str, product_id: str, quantity: Any) -> Cart:
        checked = validate_quantity(quantity)

        async def run() -> Cart:
            cart = await self.carts.get(user_id)
            existing = cart.find(product_id) if cart else None
            if cart is None or existing is None:
                raise ItemNotFoundError(product_id)
            self._ensure_mutable(cart)
            cart.upsert(replace(existing, quantity=checked))
            return await self._commit(cart)

        return await self._serial(user_id, run)

    async def remove_item(self, user_id: str, product_id: str) -> Cart:
        async def run() -> Cart:
            cart = await self.carts.get(user_id)
            if cart is None or cart.find(product_id) is None:
                raise ItemNotFoundError(product_id)
            self._ensure_mutable(cart)
            cart.discard(product_id)
            return await self._commit(cart)

        return await self._serial(user_id, run)

    async def clear_cart(self, user_id: str) -> Cart:
        """Empty the cart and forget its remote session."""

        async def run() -> Cart:
            cart = await self.carts.get(user_id)
            if cart is None:
                raise CartNotFoundError()
            self._ensure_mutable(cart)
            cart.items = []
            cart.session_id = None
            cart.sync_status = SyncStatus.SYNCED
            cart.last_sync_error = None
            await self.sessions.delete(user_id)
            await self.carts.update(user_id, cart)
            logger.info("Cleared cart", user_id=user_id)
            return cart

        return await self._serial(user_id, run)

    async def set_tax_context(self, user_id: str, context: TaxContext) -> Cart:
        async def run() -> Cart:
            cart = await self._load(user_id)
            cart.tax_context = context
            await self.carts.update(user_id, cart)
            return cart

        return await self._serial(user_id, run)

    async def checkout(self, user_id: str) -> CheckoutResult:
        """At-most-once checkout. Returns a tagged result, never raises."""
        return await self.orchestrator.checkout(user_id)

    # ═══════════════════════════════════════════════════════════════════════════
    # Helpers — call only from inside the user's slot
    # ═══════════════════════════════════════════════════════════════════════════

    async def _serial[T](self, user_id: str, run: Task[T]) -> T:
        with log_context(user_id=user_id):
            return await self.sequencer.enqueue(user_id, run)

    async def _load(self, user_id: str) -> Cart:
        cart = await self.carts.get(user_id)
        if cart is None:
            cart = Cart.new(user_id)
            await self.carts.set(user_id, cart)
            logger.debug("Created cart", user_id=user_id, cart_id=cart.id)
        return cart

    async def _commit(self, cart: Cart) -> Cart:
        await self.carts.update(cart.user_id, cart)
        await self.reconciler.sync(cart)
        return cart

    @staticmethod
    def _ensure_mutable(cart: Cart) -> None:
        if cart.checkout_status is CheckoutStatus.COMPLETED:
            raise CheckoutConflictError()

    def _context(self, cart: Cart) -> TaxContext:
        return cart.tax_context or TaxContext(self.policy.default_jurisdiction)


__all__ = ("CartService", "CartSummary")
