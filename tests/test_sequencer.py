"""Per-user operation ordering."""

from __future__ import annotations

import asyncio

import pytest
from structlog.testing import capture_logs

from cartsync import ItemNotFoundError
from cartsync.sequencer import OperationSequencer


async def test_same_key_runs_in_submission_order() -> None:
    seq = OperationSequencer[str]()
    finished: list[int] = []

    def task(n: int, delay: float):
        async def run() -> int:
            await asyncio.sleep(delay)
            finished.append(n)
            return n

        return run

    results = await asyncio.gather(
        seq.enqueue("u1", task(1, 0.03)),
        seq.enqueue("u1", task(2, 0.01)),
        seq.enqueue("u1", task(3, 0)),
    )

    assert finished == [1, 2, 3]
    assert results == [1, 2, 3]


async def test_same_key_never_overlaps() -> None:
    seq = OperationSequencer[str]()
    running = 0
    peak = 0

    async def run() -> None:
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.005)
        running -= 1

    await asyncio.gather(*(seq.enqueue("u1", run) for _ in range(5)))

    assert peak == 1


async def test_other_keys_do_not_wait() -> None:
    seq = OperationSequencer[str]()
    gate = asyncio.Event()

    async def blocked() -> str:
        await gate.wait()
        return "a"

    async def quick() -> str:
        return "b"

    slow = asyncio.ensure_future(seq.enqueue("user-a", blocked))
    await asyncio.sleep(0)

    assert await asyncio.wait_for(seq.enqueue("user-b", quick), timeout=1) == "b"
    assert not slow.done()

    gate.set()
    assert await slow == "a"


async def test_failure_reaches_only_its_caller() -> None:
    seq = OperationSequencer[str]()

    async def boom() -> None:
        raise ValueError("bad input")

    async def fine() -> str:
        return "ok"

    first = asyncio.ensure_future(seq.enqueue("u1", boom))
    second = asyncio.ensure_future(seq.enqueue("u1", fine))

    with pytest.raises(ValueError, match="bad input"):
        await first
    assert await second == "ok"


async def test_key_released_when_chain_drains() -> None:
    seq = OperationSequencer[str]()
    gate = asyncio.Event()

    async def wait() -> None:
        await gate.wait()

    pending = asyncio.ensure_future(seq.enqueue("u1", wait))
    await asyncio.sleep(0)
    assert seq.has_queue("u1")
    assert seq.active_keys == 1

    gate.set()
    await pending

    assert not seq.has_queue("u1")
    assert seq.active_keys == 0


async def test_cancelled_waiter_keeps_order() -> None:
    seq = OperationSequencer[str]()
    gate = asyncio.Event()
    order: list[str] = []

    async def first() -> None:
        await gate.wait()
        order.append("first")

    async def second() -> None:
        order.append("second")

    async def third() -> None:
        order.append("third")

    a = asyncio.ensure_future(seq.enqueue("u1", first))
    b = asyncio.ensure_future(seq.enqueue("u1", second))
    await asyncio.sleep(0)
    c = asyncio.ensure_future(seq.enqueue("u1", third))
    await asyncio.sleep(0)

    b.cancel()
    await asyncio.sleep(0)
    assert order == []

    gate.set()
    await a
    await c

    assert order == ["first", "third"]


async def test_rejections_log_below_error() -> None:
    seq = OperationSequencer[str]()

    async def reject() -> None:
        raise ItemNotFoundError("phone-1")

    async def crash() -> None:
        raise RuntimeError("boom")

    with capture_logs() as logs:
        with pytest.raises(ItemNotFoundError):
            await seq.enqueue("u1", reject)
        with pytest.raises(RuntimeError):
            await seq.enqueue("u1", crash)

    assert [(e["event"], e["log_level"]) for e in logs] == [
        ("Sequenced operation rejected", "debug"),
        ("Sequenced operation failed", "error"),
    ]
