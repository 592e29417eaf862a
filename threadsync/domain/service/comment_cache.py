"""Memoized comment forests keyed by thread id."""

from typing import Optional

from threadsync.domain.model import CommentForest
from threadsync.domain.service.comment_tree import find_comment
from threadsync.domain.value import CommentId, ThreadId


class CommentResultCache:
    """Built comment forests per thread.

    A derived view only: the thread store owns the data and must invalidate an
    entry whenever that thread's comments or per-comment fields change, before
    anyone reads it again. No eviction; a browsing session stays small.
    """

    def __init__(self) -> None:
        self._forests: dict[ThreadId, CommentForest] = {}

    def get(self, thread_id: ThreadId) -> Optional[CommentForest]:
        return self._forests.get(thread_id)

    def put(self, thread_id: ThreadId, forest: CommentForest) -> None:
        self._forests[thread_id] = forest

    def invalidate(self, thread_id: ThreadId) -> None:
        self._forests.pop(thread_id, None)

    def invalidate_comment(self, comment_id: CommentId) -> list[ThreadId]:
        """Drop every forest containing ``comment_id``.

        Returns:
            Ids of the threads whose entries were dropped
        """
        stale = [
            thread_id
            for thread_id, forest in self._forests.items()
            if find_comment(forest, comment_id) is not None
        ]
        for thread_id in stale:
            del self._forests[thread_id]
        return stale

    def clear(self) -> None:
        self._forests.clear()

    def __contains__(self, thread_id: object) -> bool:
        return thread_id in self._forests

    def __len__(self) -> int:
        return len(self._forests)
