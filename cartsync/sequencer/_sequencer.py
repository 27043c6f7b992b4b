"""
Per-key FIFO execution of async tasks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable

from cartsync._errors import CartError
from cartsync._logging import get_logger

logger = get_logger(__name__)

type Task[T] = Callable[[], Awaitable[T]]


# ═══════════════════════════════════════════════════════════════════════════════
# OperationSequencer
# ═══════════════════════════════════════════════════════════════════════════════


class OperationSequencer[K: Hashable]:
    """
    Serializes tasks per key; different keys never wait on each other.

    Each key maps to the tail of its chain: a future resolved when the most
    recently submitted task for that key has finished. A new task waits on
    the previous tail, runs, then resolves its own tail. Tails only ever
    resolve with None, so a failing task does not poison its successors.

    Example:
        sequencer = OperationSequencer[str]()
        cart = await sequencer.enqueue(user_id, lambda: add(user_id, item))
    """

    __slots__ = ("_tails",)

    def __init__(self) -> None:
        self._tails: dict[K, asyncio.Future[None]] = {}

    async def enqueue[T](self, key: K, task: Task[T]) -> T:
        """Run task after every previously enqueued task for key."""
        previous = self._tails.get(key)
        tail: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._tails[key] = tail

        def release(_: object = None) -> None:
            if not tail.done():
                tail.set_result(None)
            if self._tails.get(key) is tail:
                del self._tails[key]

        try:
            if previous is not None:
                await asyncio.shield(previous)
            return await task()
        except CartError as exc:
            logger.debug("Sequenced operation rejected", key=str(key), error=str(exc))
            raise
        except Exception as exc:
            logger.error("Sequenced operation failed", key=str(key), error=str(exc))
            raise
        finally:
            # A cancelled waiter must not let its successor overtake the predecessor.
            if previous is None or previous.done():
                release()
            else:
                previous.add_done_callback(release)

    @property
    def active_keys(self) -> int:
        return len(self._tails)

    def has_queue(self, key: K) -> bool:
        return key in self._tails

    def clear(self) -> None:
        """Forget all chains. Tasks already waiting still run in order."""
        self._tails.clear()


__all__ = ("OperationSequencer", "Task")
