"""
Stores — process-lifetime holders for carts and remote session handles.

    from cartsync import store as St

    carts = St.CartStore()
    sessions = St.SessionStore()

The two stores expire on independent clocks: a cart outlives many remote
sessions, and a session handle never owns its cart.
"""

from cartsync.store._cart import CartStore
from cartsync.store._session import SessionStore

__all__ = ("CartStore", "SessionStore")
