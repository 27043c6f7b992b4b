"""
Sequencer — per-key serialization of async operations.

    from cartsync import sequencer as Q

    seq = Q.OperationSequencer[str]()
    result = await seq.enqueue("user-1", lambda: do_work())
"""

from cartsync.sequencer._sequencer import OperationSequencer, Task

__all__ = ("OperationSequencer", "Task")
