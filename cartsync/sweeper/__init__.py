"""
Sweeper — background eviction of stale carts and session handles.

    from cartsync import sweeper as Sw

    sweeper = Sw.CleanupSweeper(carts, sessions, policy)
    sweeper.start()
    report = await sweeper.run_once()
    await sweeper.stop()
"""

from cartsync.sweeper._sweeper import SweepReport, CleanupSweeper

__all__ = ("SweepReport", "CleanupSweeper")
