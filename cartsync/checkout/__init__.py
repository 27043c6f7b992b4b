"""
Checkout — state machine and orchestrator.

    from cartsync import checkout as Co

    orchestrator = Co.CheckoutOrchestrator(
        carts, sessions, sequencer, reconciler, provider, tax, policy,
    )
    result = await orchestrator.checkout("user-1")
    if result.ok:
        print(result.order_id, result.total)

    Co.transition(cart, CheckoutStatus.FAILED, now, error="...")
"""

from cartsync.checkout._machine import TRANSITIONS, can_transition, transition
from cartsync.checkout._orchestrator import CheckoutOrchestrator

__all__ = ("TRANSITIONS", "can_transition", "transition", "CheckoutOrchestrator")
