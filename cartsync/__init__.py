"""
cartsync — local-first carts mirrored onto volatile commerce sessions.

    from cartsync import cart as Ca       # Caller-facing service
    from cartsync import checkout as Co   # At-most-once checkout
    from cartsync import sync as S        # Remote session reconciliation
    from cartsync import provider as P    # Commerce provider capability
    from cartsync import tax as T         # Jurisdiction tax
    from cartsync import sweeper as Sw    # Background cleanup
"""

from cartsync import sequencer
from cartsync import store
from cartsync import provider
from cartsync import sync
from cartsync import tax
from cartsync import checkout
from cartsync import sweeper
from cartsync import cart
from cartsync._errors import (
    ErrorCode,
    Messages,
    CartError,
    ValidationError,
    CartNotFoundError,
    ItemNotFoundError,
    CheckoutConflictError,
    ConcurrencyError,
    InvalidTransitionError,
)
from cartsync._logging import configure_logging, get_logger
from cartsync._policy import CartPolicy
from cartsync._types import (
    ProductType,
    SyncStatus,
    CheckoutStatus,
    LineItem,
    TaxContext,
    TaxLine,
    TaxBreakdown,
    SessionHandle,
    RemoteCart,
    CheckoutResult,
    Cart,
)
from cartsync.cart import CartService, CartSummary

__version__ = "0.1.0"

__all__ = (
    "sequencer",
    "store",
    "provider",
    "sync",
    "tax",
    "checkout",
    "sweeper",
    "cart",
    "ErrorCode",
    "Messages",
    "CartError",
    "ValidationError",
    "CartNotFoundError",
    "ItemNotFoundError",
    "CheckoutConflictError",
    "ConcurrencyError",
    "InvalidTransitionError",
    "configure_logging",
    "get_logger",
    "CartPolicy",
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
    "CartService",
    "CartSummary",
)
