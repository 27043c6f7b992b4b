"""
Sync — keep a remote session mirroring the local cart.

    from cartsync import sync as S

    reconciler = S.Reconciler(provider, sessions)
    await reconciler.sync(cart)            # never raises
    await reconciler.sync(cart, fresh=True)

    S.plan(local_items, remote_items)      # pure diff
"""

from cartsync.sync._diff import SyncPlan, plan, mismatch
from cartsync.sync._reconciler import Reconciler

__all__ = ("SyncPlan", "plan", "mismatch", "Reconciler")
