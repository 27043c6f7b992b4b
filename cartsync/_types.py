"""
Core types — cart, line items, session handles, checkout results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum


def utcnow() -> datetime:
    """Current time, timezone-aware."""
    return datetime.now(UTC)


# ═══════════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════════


class ProductType(Enum):
    DEVICE = "device"
    ACCESSORY = "accessory"
    PLAN = "plan"
    SERVICE = "service"


class SyncStatus(Enum):
    """Local view of how far the remote session lags behind the cart."""

    SYNCED = "synced"
    PENDING = "pending"
    FAILED = "failed"


class CheckoutStatus(Enum):
    """
    Checkout lifecycle.

        PENDING → IN_PROGRESS → COMPLETED
                       │  ▲
                       ▼  │
                      FAILED
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


# ═══════════════════════════════════════════════════════════════════════════════
# Line Item — Value Type
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LineItem:
    product_id: str
    name: str
    product_type: ProductType
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


# ═══════════════════════════════════════════════════════════════════════════════
# Tax Values
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class TaxContext:
    """
    Where and when tax is computed.

    as_of=None means "today" at calculation time.
    """

    jurisdiction: str
    as_of: date | None = None
    customer_id: str | None = None


@dataclass(frozen=True, slots=True)
class TaxLine:
    jurisdiction: str
    name: str
    rate: Decimal
    taxable_amount: Decimal
    amount: Decimal


@dataclass(frozen=True, slots=True)
class TaxBreakdown:
    subtotal: Decimal
    lines: tuple[TaxLine, ...]
    total_tax: Decimal
    total: Decimal


# ═══════════════════════════════════════════════════════════════════════════════
# External Session
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SessionHandle:
    """
    Local reference to a remote cart session.

    Never mutated in place: invalidation produces a copy with expired=True.
    """

    session_id: str
    remote_cart_id: str
    provider: str
    created_at: datetime
    expires_at: datetime
    expired: bool = False

    def is_live(self, now: datetime | None = None) -> bool:
        return not self.expired and (now or utcnow()) < self.expires_at


@dataclass(frozen=True, slots=True)
class RemoteCart:
    remote_cart_id: str
    items: tuple[LineItem, ...]


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutResult:
    """
    Tagged outcome of a checkout attempt.

    A COMPLETED result is produced once per cart and replayed from cache.
    """

    user_id: str
    status: CheckoutStatus
    subtotal: Decimal = Decimal("0")
    tax_lines: tuple[TaxLine, ...] = ()
    total_tax: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    items: tuple[LineItem, ...] = ()
    order_id: str | None = None
    completed_at: datetime | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is CheckoutStatus.COMPLETED

    @classmethod
    def failed(
        cls,
        user_id: str,
        error: str,
        items: tuple[LineItem, ...] = (),
        breakdown: TaxBreakdown | None = None,
    ) -> CheckoutResult:
        if breakdown is None:
            return cls(user_id=user_id, status=CheckoutStatus.FAILED, items=items, error=error)
        return cls(
            user_id=user_id,
            status=CheckoutStatus.FAILED,
            subtotal=breakdown.subtotal,
            tax_lines=breakdown.lines,
            total_tax=breakdown.total_tax,
            total=breakdown.total,
            items=items,
            error=error,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Cart — Mutable Aggregate
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class Cart:
    """
    One user's basket. Source of truth; the remote session is a cache of it.

    Note: only ever mutated inside the owning user's sequencer slot
    (the sweeper being the single best-effort exception).
    """

    id: str
    user_id: str
    items: list[LineItem] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    last_accessed_at: datetime = field(default_factory=utcnow)
    session_id: str | None = None
    tax_context: TaxContext | None = None

    sync_status: SyncStatus = SyncStatus.SYNCED
    last_synced_at: datetime | None = None
    last_sync_error: str | None = None

    checkout_status: CheckoutStatus = CheckoutStatus.PENDING
    checkout_started_at: datetime | None = None
    checkout_completed_at: datetime | None = None
    checkout_result: CheckoutResult | None = None
    checkout_error: str | None = None

    @classmethod
    def new(cls, user_id: str) -> Cart:
        now = utcnow()
        return cls(
            id=f"cart_{int(now.timestamp() * 1000)}_{user_id}",
            user_id=user_id,
            created_at=now,
            updated_at=now,
            last_accessed_at=now,
        )

    def find(self, product_id: str) -> LineItem | None:
        return next((i for i in self.items if i.product_id == product_id), None)

    def upsert(self, item: LineItem) -> None:
        """Replace the line with the same product id, or append."""
        for index, existing in enumerate(self.items):
            if existing.product_id == item.product_id:
                self.items[index] = item
                return
        self.items.append(item)

    def discard(self, product_id: str) -> bool:
        before = len(self.items)
        self.items = [i for i in self.items if i.product_id != product_id]
        return len(self.items) != before

    def touch(self, now: datetime | None = None) -> None:
        stamp = now or utcnow()
        self.updated_at = stamp
        self.last_accessed_at = stamp

    @property
    def subtotal(self) -> Decimal:
        return sum((i.line_total for i in self.items), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)


__all__ = (
    "utcnow",
    "ProductType",
    "SyncStatus",
    "CheckoutStatus",
    "LineItem",
    "TaxContext",
    "TaxLine",
    "TaxBreakdown",
    "SessionHandle",
    "RemoteCart",
    "CheckoutResult",
    "Cart",
)
