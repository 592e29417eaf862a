"""Test configuration and shared helpers."""

from datetime import datetime, timezone
from typing import Any, Callable

from threadsync.domain.model import Comment, Thread
from threadsync.domain.value import CommentId, ThreadId


def make_thread(thread_id: int, **fields: Any) -> Thread:
    """Helper building a thread with sensible defaults.

    Args:
        thread_id: Numeric thread id
        **fields: Overrides for any Thread field

    Returns:
        Thread
    """
    defaults: dict[str, Any] = {
        "title": f"Thread {thread_id}",
        "description": "What is this object?",
        "author": "alice",
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    defaults.update(fields)
    return Thread(id=ThreadId(thread_id), **defaults)


def make_comment(
    comment_id: int, parent_comment_id: int | None = None, **fields: Any
) -> Comment:
    """Helper building a flat comment.

    Args:
        comment_id: Numeric comment id
        parent_comment_id: Parent comment id (None for top-level)
        **fields: Overrides for any Comment field

    Returns:
        Comment
    """
    defaults: dict[str, Any] = {
        "content": f"Comment {comment_id}",
        "author": "bob",
    }
    defaults.update(fields)
    return Comment(
        id=CommentId(comment_id),
        parent_comment_id=(
            CommentId(parent_comment_id) if parent_comment_id is not None else None
        ),
        **defaults,
    )


class ManualHandle:
    """Timer handle fired explicitly by the test."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimer:
    """Timer primitive for ``Debouncer`` that never fires on its own."""

    def __init__(self) -> None:
        self.handles: list[ManualHandle] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def fire(self) -> int:
        """Fire every live handle, as if the quiet period elapsed.

        Returns:
            Number of callbacks run
        """
        live = self.active
        for handle in live:
            handle.cancelled = True
            handle.callback()
        return len(live)
