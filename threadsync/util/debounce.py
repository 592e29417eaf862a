"""Debounced execution of deferred work.

A burst of ``schedule`` calls collapses into a single invocation of the most
recently scheduled callable, run once the quiet period elapses. The timer
primitive is injected so the debouncer works with any event loop, or with a
manual timer in tests.
"""

import asyncio
from collections.abc import Callable
from typing import Protocol

import logfire


class TimerHandle(Protocol):
    """Handle returned by a timer, cancellable before it fires."""

    def cancel(self) -> None: ...


Timer = Callable[[float, Callable[[], None]], TimerHandle]


class UnarmedHandle:
    """Handle for a call that no loop will ever fire on its own."""

    def cancel(self) -> None:
        pass


def loop_timer(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """Schedule ``callback`` on the running asyncio loop.

    Outside a running loop nothing is armed: the call stays pending until the
    next ``schedule`` made inside a loop, or an explicit ``flush``.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return UnarmedHandle()
    return loop.call_later(delay, callback)


class Debouncer:
    """Coalesces rapid successive calls into one call after a quiet period.

    Attributes:
        delay: Quiet period in seconds
    """

    def __init__(self, delay: float, timer: Timer = loop_timer) -> None:
        """Initialize debouncer.

        Args:
            delay: Quiet period in seconds before the scheduled call runs
            timer: Timer primitive, defaults to the running asyncio loop
        """
        self.delay = delay
        self._timer = timer
        self._handle: TimerHandle | None = None
        self._pending: Callable[[], None] | None = None

    @property
    def pending(self) -> bool:
        """Whether a call is waiting for the quiet period to elapse."""
        return self._pending is not None

    def schedule(self, fn: Callable[[], None]) -> None:
        """Schedule ``fn``, replacing and restarting any pending call."""
        if self._handle is not None:
            self._handle.cancel()
        self._pending = fn
        self._handle = self._timer(self.delay, self._fire)

    def cancel(self) -> None:
        """Drop the pending call without running it."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = None

    def flush(self) -> None:
        """Run the pending call now, if any."""
        if self._handle is not None:
            self._handle.cancel()
        self._fire()

    def _fire(self) -> None:
        fn = self._pending
        self._handle = None
        self._pending = None
        if fn is None:
            return
        try:
            fn()
        except Exception as e:
            # Timer callbacks have no caller to propagate to
            logfire.error(
                "Debounced call failed",
                error=str(e),
                error_type=type(e).__name__,
            )
