"""Push notifications for store subscribers."""

from collections.abc import Callable

import logfire

from threadsync.application.store.state import StoreState

Listener = Callable[[StoreState], None]


class StateObservers:
    """Subscriber list notified with a fresh ``StoreState`` after each change.

    Optional layer: the store is fully usable through its synchronous
    accessors without any subscriber.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            Function removing the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, state: StoreState) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                # One broken subscriber must not stop the others or the store
                logfire.error(
                    "Store subscriber failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)
