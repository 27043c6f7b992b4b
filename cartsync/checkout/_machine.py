"""
Checkout state machine — legal transitions and their side effects on Cart.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from cartsync._errors import InvalidTransitionError
from cartsync._types import Cart, CheckoutResult, CheckoutStatus

S = CheckoutStatus

TRANSITIONS: dict[CheckoutStatus, frozenset[CheckoutStatus]] = {
    S.PENDING: frozenset({S.IN_PROGRESS}),
    S.IN_PROGRESS: frozenset({S.IN_PROGRESS, S.COMPLETED, S.FAILED}),
    S.FAILED: frozenset({S.IN_PROGRESS}),
    S.COMPLETED: frozenset(),
}


def can_transition(
    cart: Cart,
    target: CheckoutStatus,
    now: datetime,
    grace: timedelta | None = None,
) -> bool:
    """
    IN_PROGRESS → IN_PROGRESS is a takeover of an abandoned attempt and is
    legal only once the previous attempt is older than grace.
    """
    if target not in TRANSITIONS[cart.checkout_status]:
        return False

    if cart.checkout_status is S.IN_PROGRESS and target is S.IN_PROGRESS:
        if grace is None:
            return False
        started = cart.checkout_started_at
        return started is None or now - started > grace

    return True


def transition(
    cart: Cart,
    target: CheckoutStatus,
    now: datetime,
    *,
    grace: timedelta | None = None,
    result: CheckoutResult | None = None,
    error: str | None = None,
) -> None:
    """
    Move cart to target, stamping the fields that state owns.

    Raises InvalidTransitionError for a move the table does not allow.
    """
    if not can_transition(cart, target, now, grace):
        raise InvalidTransitionError(cart.checkout_status, target)

    match target:
        case S.IN_PROGRESS:
            cart.checkout_started_at = now
            cart.checkout_result = None
            cart.checkout_error = None
        case S.COMPLETED:
            if result is None:
                raise ValueError("Completed checkout requires a result")
            cart.checkout_completed_at = now
            cart.checkout_result = result
            cart.checkout_error = None
        case S.FAILED:
            cart.checkout_result = None
            cart.checkout_error = error
        case S.PENDING:
            pass

    cart.checkout_status = target


__all__ = ("TRANSITIONS", "can_transition", "transition")
