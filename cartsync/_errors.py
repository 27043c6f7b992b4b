"""
Errors raised by the cart API.

Checkout never raises these; it returns a tagged CheckoutResult instead.
Provider failures travel as ProviderError values (see cartsync.provider).
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CART_NOT_FOUND = "CART_NOT_FOUND"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    CHECKOUT_ERROR = "CHECKOUT_ERROR"
    CHECKOUT_CONFLICT = "CHECKOUT_CONFLICT"
    EMPTY_CART = "EMPTY_CART"
    OPERATION_TIMEOUT = "OPERATION_TIMEOUT"


class Messages:
    """Message catalogue shared by errors and failed checkout results."""

    VALIDATION_FAILED = "Validation failed"
    INVALID_ITEM_DATA = "Invalid item data"
    CART_NOT_FOUND = "Cart not found or already checked out"
    ITEM_NOT_FOUND = "Item not found in cart"
    CHECKOUT_FAILED = "Checkout failed"
    EMPTY_CART = "Cannot checkout an empty cart"
    OPERATION_TIMEOUT = "Operation queue is busy, please retry"
    ALREADY_CHECKED_OUT = "Cart already checked out"
    CHECKOUT_IN_PROGRESS = "Checkout already in progress"
    PROVIDER_CHECKOUT_FAILED = "Provider checkout failed"
    CHECKOUT_TIMEOUT = "Checkout timeout - please retry"
    SYNC_ITEM_COUNT_MISMATCH = "Cart sync validation failed: item count mismatch"
    SYNC_ITEM_MISMATCH = "Cart sync validation failed: item mismatch"
    UNKNOWN_ERROR = "Unknown error"

    PRODUCT_ID_REQUIRED = "Product ID is required"
    PRODUCT_NAME_REQUIRED = "Product name is required"
    QUANTITY_MUST_BE_INTEGER = "Quantity must be an integer >= 1"
    PRICE_MUST_BE_NON_NEGATIVE = "Price must be >= 0"

    @staticmethod
    def type_must_be_one_of(valid: list[str]) -> str:
        return f"Type must be one of: {', '.join(valid)}"

    @staticmethod
    def session_expired(session_id: str) -> str:
        return f"External session expired: {session_id}"


# ═══════════════════════════════════════════════════════════════════════════════
# Hierarchy
# ═══════════════════════════════════════════════════════════════════════════════


class CartError(Exception):
    """
    Base for caller-facing errors.

    status_code is a hint for an HTTP edge; this package never serves HTTP.
    """

    code: ErrorCode = ErrorCode.CHECKOUT_ERROR
    status_code: int = 500
    default_message: str = Messages.UNKNOWN_ERROR

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(CartError):
    code = ErrorCode.VALIDATION_ERROR
    status_code = 400
    default_message = Messages.VALIDATION_FAILED


class CartNotFoundError(CartError):
    code = ErrorCode.CART_NOT_FOUND
    status_code = 404
    default_message = Messages.CART_NOT_FOUND


class ItemNotFoundError(CartError):
    code = ErrorCode.ITEM_NOT_FOUND
    status_code = 404
    default_message = Messages.ITEM_NOT_FOUND

    def __init__(self, product_id: str) -> None:
        super().__init__(details={"product_id": product_id})
        self.product_id = product_id


class CheckoutConflictError(CartError):
    """Mutation attempted on a cart whose checkout already completed."""

    code = ErrorCode.CHECKOUT_CONFLICT
    status_code = 422
    default_message = Messages.ALREADY_CHECKED_OUT


class ConcurrencyError(CartError):
    """Reserved for bounded per-user queues; unbounded queues never raise it."""

    code = ErrorCode.OPERATION_TIMEOUT
    status_code = 503
    default_message = Messages.OPERATION_TIMEOUT


class InvalidTransitionError(Exception):
    """A checkout status change that the state machine does not allow."""

    def __init__(self, current: Any, target: Any) -> None:
        super().__init__(f"Illegal checkout transition: {current.value} -> {target.value}")
        self.current = current
        self.target = target


__all__ = (
    "ErrorCode",
    "Messages",
    "CartError",
    "ValidationError",
    "CartNotFoundError",
    "ItemNotFoundError",
    "CheckoutConflictError",
    "ConcurrencyError",
    "InvalidTransitionError",
)
