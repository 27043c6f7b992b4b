"""
Cart policy — timing configuration for checkout, sweeping, and sessions.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta


def _delta(
    seconds: float | None,
    minutes: float | None,
    hours: float | None,
    delta: timedelta | None,
) -> timedelta:
    if delta is not None:
        return delta
    total = (seconds or 0) + (minutes or 0) * 60 + (hours or 0) * 3600
    if total <= 0:
        raise ValueError("Duration must be positive")
    return timedelta(seconds=total)


# ═══════════════════════════════════════════════════════════════════════════════
# CartPolicy
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartPolicy:
    """
    Timing and default configuration.

    Fluent builder — each method returns a new policy.

    Example:
        policy = (
            CartPolicy()
            .with_checkout_grace(seconds=30)
            .with_sweep_interval(minutes=1)
        )

    checkout_grace: how long an IN_PROGRESS checkout blocks a new attempt.
    stuck_checkout_timeout: when the sweeper marks IN_PROGRESS as FAILED.
    failed_retention: how long a FAILED cart survives the sweeper.
    inactive_cart_ttl: eviction age measured from last access.
    """

    checkout_grace: timedelta = timedelta(seconds=60)
    stuck_checkout_timeout: timedelta = timedelta(minutes=5)
    failed_retention: timedelta = timedelta(hours=1)
    inactive_cart_ttl: timedelta = timedelta(hours=24)
    sweep_interval: timedelta = timedelta(minutes=5)
    session_lifetime: timedelta = timedelta(minutes=30)
    default_jurisdiction: str = "CA-ON"

    def with_checkout_grace(
        self, *, seconds: float | None = None, delta: timedelta | None = None
    ) -> CartPolicy:
        return replace(self, checkout_grace=_delta(seconds, None, None, delta))

    def with_stuck_checkout_timeout(
        self,
        *,
        seconds: float | None = None,
        minutes: float | None = None,
        delta: timedelta | None = None,
    ) -> CartPolicy:
        return replace(self, stuck_checkout_timeout=_delta(seconds, minutes, None, delta))

    def with_failed_retention(
        self,
        *,
        minutes: float | None = None,
        hours: float | None = None,
        delta: timedelta | None = None,
    ) -> CartPolicy:
        return replace(self, failed_retention=_delta(None, minutes, hours, delta))

    def with_inactive_ttl(
        self, *, hours: float | None = None, delta: timedelta | None = None
    ) -> CartPolicy:
        return replace(self, inactive_cart_ttl=_delta(None, None, hours, delta))

    def with_sweep_interval(
        self,
        *,
        seconds: float | None = None,
        minutes: float | None = None,
        delta: timedelta | None = None,
    ) -> CartPolicy:
        return replace(self, sweep_interval=_delta(seconds, minutes, None, delta))

    def with_session_lifetime(
        self, *, minutes: float | None = None, delta: timedelta | None = None
    ) -> CartPolicy:
        return replace(self, session_lifetime=_delta(None, minutes, None, delta))

    def with_default_jurisdiction(self, jurisdiction: str) -> CartPolicy:
        return replace(self, default_jurisdiction=jurisdiction)


__all__ = ("CartPolicy",)
