"""Remote forum collaborator interface."""

from typing import Any

from threadsync.domain.model import (
    Comment,
    CommentDraft,
    ResolutionDraft,
    Thread,
    ThreadPage,
    VoteTally,
)
from threadsync.domain.value import CommentId, ThreadId


class ForumClient:
    """Generic client for the remote forum API.

    Implementations raise ``threadsync.adapter.error.TransportError`` when the
    remote call fails; the store decides whether that propagates.
    """

    async def fetch_threads(self, page: int, size: int) -> ThreadPage:
        """Fetch one page of the thread collection.

        Args:
            page: Zero-based page index
            size: Page size

        Returns:
            Threads on the page and whether it is the last one
        """
        raise NotImplementedError

    async def fetch_thread(self, thread_id: ThreadId) -> Thread:
        """Fetch full details of a single thread."""
        raise NotImplementedError

    async def fetch_comments(self, thread_id: ThreadId) -> list[Comment]:
        """Fetch all comments of a thread as a flat list in server order."""
        raise NotImplementedError

    async def create_comment(self, draft: CommentDraft) -> Comment:
        """Create a comment or reply.

        Args:
            draft: Comment content, target thread and optional parent

        Returns:
            The created comment as stored by the server
        """
        raise NotImplementedError

    async def vote_thread(self, thread_id: ThreadId, is_upvote: bool) -> VoteTally:
        """Record the current user's vote on a thread."""
        raise NotImplementedError

    async def vote_comment(self, comment_id: CommentId, is_upvote: bool) -> VoteTally:
        """Record the current user's vote on a comment."""
        raise NotImplementedError

    async def resolve_thread(
        self, thread_id: ThreadId, resolution: ResolutionDraft
    ) -> dict[str, Any]:
        """Mark a thread as solved.

        Returns:
            Acknowledgement payload from the server
        """
        raise NotImplementedError

    async def unresolve_thread(self, thread_id: ThreadId) -> dict[str, Any]:
        """Reopen a solved thread."""
        raise NotImplementedError

    async def mark_best_answer(
        self, thread_id: ThreadId, comment_id: CommentId
    ) -> dict[str, Any]:
        """Mark a comment as the thread's best answer."""
        raise NotImplementedError
