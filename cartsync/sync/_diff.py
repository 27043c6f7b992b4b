"""
Sync plan — pure diff of local items against remote items.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from cartsync._errors import Messages
from cartsync._types import LineItem


@dataclass(frozen=True, slots=True)
class SyncPlan:
    """
    Operations that make the remote item list equal the local one.

    Removals are applied before additions.
    """

    to_add: tuple[LineItem, ...]
    to_remove: tuple[str, ...]

    @property
    def empty(self) -> bool:
        return not self.to_add and not self.to_remove


def plan(local: Sequence[LineItem], remote: Sequence[LineItem]) -> SyncPlan:
    """
    to_add: local items missing remotely or with a different quantity.
    to_remove: remote product ids no longer present locally.
    """
    remote_qty = {i.product_id: i.quantity for i in remote}
    local_ids = {i.product_id for i in local}

    to_add = tuple(i for i in local if remote_qty.get(i.product_id) != i.quantity)
    to_remove = tuple(i.product_id for i in remote if i.product_id not in local_ids)

    return SyncPlan(to_add=to_add, to_remove=to_remove)


def mismatch(local: Sequence[LineItem], remote: Sequence[LineItem]) -> str | None:
    """Strict comparison used before checkout. None when equal."""
    if len(local) != len(remote):
        return Messages.SYNC_ITEM_COUNT_MISMATCH

    remote_qty = {i.product_id: i.quantity for i in remote}
    for item in local:
        if remote_qty.get(item.product_id) != item.quantity:
            return Messages.SYNC_ITEM_MISMATCH

    return None


__all__ = ("SyncPlan", "plan", "mismatch")
