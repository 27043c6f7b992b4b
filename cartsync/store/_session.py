"""
Session store — in-memory user id → SessionHandle map with expiry on read.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime

from cartsync._types import SessionHandle, utcnow


class SessionStore:
    """
    Holds remote session handles independently of carts.

    A handle that is flagged expired or past expires_at is treated as absent
    and dropped the moment it is read.
    """

    def __init__(self) -> None:
        self._handles: dict[str, SessionHandle] = {}
        self._lock = asyncio.Lock()

    async def get(self, user_id: str, now: datetime | None = None) -> SessionHandle | None:
        async with self._lock:
            handle = self._handles.get(user_id)
            if handle is None:
                return None

            if not handle.is_live(now or utcnow()):
                del self._handles[user_id]
                return None

            return handle

    async def set(self, user_id: str, handle: SessionHandle) -> None:
        async with self._lock:
            self._handles[user_id] = handle

    async def invalidate(self, user_id: str) -> bool:
        """Flag the handle expired, e.g. after the provider reported it gone."""
        async with self._lock:
            handle = self._handles.get(user_id)
            if handle is None:
                return False
            self._handles[user_id] = replace(handle, expired=True)
            return True

    async def delete(self, user_id: str) -> bool:
        async with self._lock:
            return self._handles.pop(user_id, None) is not None

    async def exists(self, user_id: str) -> bool:
        return await self.get(user_id) is not None

    async def snapshot(self) -> list[tuple[str, SessionHandle]]:
        """Raw entries, expired ones included."""
        async with self._lock:
            return list(self._handles.items())

    def __len__(self) -> int:
        return len(self._handles)

    def clear(self) -> None:
        self._handles.clear()


__all__ = ("SessionStore",)
