"""
Provider — the external commerce capability.

    from cartsync import provider as P

    remote = P.MemoryCommerceProvider()
    match await remote.create_session("user-1", items):
        case Ok(handle): ...
        case Error(err) if err.session_expired: ...

Implement P.CommerceProvider for a real platform; every method returns a
kungfu Result and never raises.
"""

from cartsync.provider._types import (
    ProviderErrorKind,
    ProviderError,
    ProviderOrder,
    CommerceProvider,
    guarded,
)
from cartsync.provider._memory import MemoryCommerceProvider

__all__ = (
    "ProviderErrorKind",
    "ProviderError",
    "ProviderOrder",
    "CommerceProvider",
    "guarded",
    "MemoryCommerceProvider",
)
