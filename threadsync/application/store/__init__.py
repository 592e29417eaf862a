"""Thread store application layer."""

from .observer import Listener, StateObservers
from .state import StoreState
from .thread_store import ThreadStore

__all__ = [
    "Listener",
    "StateObservers",
    "StoreState",
    "ThreadStore",
]
