"""Forum API client implementations.

``HttpForumClient`` talks to the real backend through ``HttpTransport``.
``MockForumClient`` is an in-memory stand-in with the same behavior, used by
the test container and for offline development.
"""

from datetime import datetime, timezone
from typing import Any, TypeVar

import logfire
from pydantic import TypeAdapter, ValidationError

from threadsync.adapter.error import PayloadError, TransportError
from threadsync.adapter.forum.transport import HttpTransport
from threadsync.domain.model import (
    Comment,
    CommentDraft,
    ResolutionDraft,
    Thread,
    ThreadPage,
    VoteTally,
)
from threadsync.domain.service import ForumClient
from threadsync.domain.value import CommentId, ThreadId, VoteDirection

T = TypeVar("T")

_comments_adapter = TypeAdapter(list[Comment])


def _parse(adapter: TypeAdapter[T], data: Any, what: str) -> T:
    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        logfire.error("Unexpected forum API payload", payload=what, error=str(e))
        raise PayloadError(f"Unexpected {what} payload: {e}") from e


def _ack(data: Any) -> dict[str, Any]:
    return data if isinstance(data, dict) else {"result": data}


class HttpForumClient(ForumClient):
    """Forum client backed by the HTTP API."""

    def __init__(self, transport: HttpTransport) -> None:
        """Initialize forum client.

        Args:
            transport: Authenticated HTTP transport
        """
        self.transport = transport

    async def fetch_threads(self, page: int, size: int) -> ThreadPage:
        data = await self.transport.call(
            "GET",
            "/api/posts/getForPostList",
            params={"page": page, "size": size},
        )
        return _parse(TypeAdapter(ThreadPage), data, "thread page")

    async def fetch_thread(self, thread_id: ThreadId) -> Thread:
        data = await self.transport.call(
            "GET", f"/api/posts/getForPostDetails/{thread_id}"
        )
        return _parse(TypeAdapter(Thread), data, "thread")

    async def fetch_comments(self, thread_id: ThreadId) -> list[Comment]:
        data = await self.transport.call("GET", f"/api/comments/get/{thread_id}")
        return _parse(_comments_adapter, data or [], "comment list")

    async def create_comment(self, draft: CommentDraft) -> Comment:
        """Create a comment.

        The create endpoint echoes the comment without its parent link, so
        thread and parent are filled in from the draft when missing.
        """
        data = await self.transport.call(
            "POST",
            "/api/comments/create",
            body=draft.model_dump(mode="json", by_alias=True),
        )
        comment = _parse(TypeAdapter(Comment), data, "created comment")
        missing: dict[str, Any] = {}
        if comment.post_id is None:
            missing["post_id"] = draft.post_id
        if comment.parent_comment_id is None and draft.parent_comment_id is not None:
            missing["parent_comment_id"] = draft.parent_comment_id
        return comment.model_copy(update=missing) if missing else comment

    async def vote_thread(self, thread_id: ThreadId, is_upvote: bool) -> VoteTally:
        direction = VoteDirection.from_flag(is_upvote)
        data = await self.transport.call(
            "POST", f"/api/posts/{direction.value}/{thread_id}"
        )
        return _parse(TypeAdapter(VoteTally), data, "vote tally")

    async def vote_comment(self, comment_id: CommentId, is_upvote: bool) -> VoteTally:
        direction = VoteDirection.from_flag(is_upvote)
        data = await self.transport.call(
            "POST", f"/api/comments/{direction.value}/{comment_id}"
        )
        return _parse(TypeAdapter(VoteTally), data, "vote tally")

    async def resolve_thread(
        self, thread_id: ThreadId, resolution: ResolutionDraft
    ) -> dict[str, Any]:
        data = await self.transport.call(
            "PUT",
            f"/api/posts/{thread_id}/resolve",
            body=resolution.model_dump(mode="json", by_alias=True),
        )
        return _ack(data)

    async def unresolve_thread(self, thread_id: ThreadId) -> dict[str, Any]:
        data = await self.transport.call("PUT", f"/api/posts/{thread_id}/unresolve")
        return _ack(data)

    async def mark_best_answer(
        self, thread_id: ThreadId, comment_id: CommentId
    ) -> dict[str, Any]:
        data = await self.transport.call(
            "PUT", f"/api/posts/{thread_id}/best-answer/{comment_id}"
        )
        return _ack(data)


class MockForumClient(ForumClient):
    """In-memory forum for testing.

    Holds threads and flat comment lists, records every call, and can be told
    to fail the next calls with a given error.
    """

    def __init__(self) -> None:
        """Initialize an empty forum."""
        self.threads: dict[ThreadId, Thread] = {}
        self.comments: dict[ThreadId, list[Comment]] = {}
        self.calls: list[tuple[Any, ...]] = []
        self._failures: list[Exception] = []
        self._next_comment_id = 1000

    def add_thread(self, thread: Thread) -> Thread:
        self.threads[thread.id] = thread
        return thread

    def add_comments(self, thread_id: ThreadId, comments: list[Comment]) -> None:
        self.comments.setdefault(thread_id, []).extend(comments)

    def fail_next(self, error: Exception | None = None, times: int = 1) -> None:
        """Make the next ``times`` calls raise ``error`` (a 500 by default)."""
        for _ in range(times):
            self._failures.append(error or TransportError(500, "Internal Server Error"))

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if self._failures:
            raise self._failures.pop(0)

    def _require_thread(self, thread_id: ThreadId) -> Thread:
        thread = self.threads.get(thread_id)
        if thread is None:
            raise TransportError(404, f"Post not found: {thread_id}")
        return thread

    def _locate_comment(self, comment_id: CommentId) -> tuple[ThreadId, int]:
        for thread_id, comments in self.comments.items():
            for index, comment in enumerate(comments):
                if comment.id == comment_id:
                    return thread_id, index
        raise TransportError(404, f"Comment not found: {comment_id}")

    async def fetch_threads(self, page: int, size: int) -> ThreadPage:
        self._record("fetch_threads", page, size)
        ordered = list(self.threads.values())
        start = page * size
        return ThreadPage(
            items=tuple(ordered[start : start + size]),
            is_last_page=start + size >= len(ordered),
        )

    async def fetch_thread(self, thread_id: ThreadId) -> Thread:
        self._record("fetch_thread", thread_id)
        return self._require_thread(thread_id)

    async def fetch_comments(self, thread_id: ThreadId) -> list[Comment]:
        self._record("fetch_comments", thread_id)
        return list(self.comments.get(thread_id, []))

    async def create_comment(self, draft: CommentDraft) -> Comment:
        self._record("create_comment", draft)
        self._require_thread(draft.post_id)
        comment = Comment(
            id=CommentId(self._next_comment_id),
            parent_comment_id=draft.parent_comment_id,
            post_id=draft.post_id,
            content=draft.content,
            author="mockuser",
            comment_type=draft.comment_type,
            created_at=datetime.now(timezone.utc),
        )
        self._next_comment_id += 1
        self.add_comments(draft.post_id, [comment])
        return comment

    async def vote_thread(self, thread_id: ThreadId, is_upvote: bool) -> VoteTally:
        self._record("vote_thread", thread_id, is_upvote)
        thread = self._require_thread(thread_id)
        field = "upvotes" if is_upvote else "downvotes"
        thread = thread.model_copy(update={field: getattr(thread, field) + 1})
        self.threads[thread_id] = thread
        return VoteTally(upvotes=thread.upvotes, downvotes=thread.downvotes)

    async def vote_comment(self, comment_id: CommentId, is_upvote: bool) -> VoteTally:
        self._record("vote_comment", comment_id, is_upvote)
        thread_id, index = self._locate_comment(comment_id)
        comment = self.comments[thread_id][index]
        field = "upvotes" if is_upvote else "downvotes"
        comment = comment.model_copy(update={field: getattr(comment, field) + 1})
        self.comments[thread_id][index] = comment
        return VoteTally(upvotes=comment.upvotes, downvotes=comment.downvotes)

    async def resolve_thread(
        self, thread_id: ThreadId, resolution: ResolutionDraft
    ) -> dict[str, Any]:
        self._record("resolve_thread", thread_id, resolution)
        self._require_thread(thread_id)
        return {
            "postId": thread_id,
            "resolved": True,
            "description": resolution.description,
            "contributingCommentIds": list(resolution.contributing_comment_ids),
        }

    async def unresolve_thread(self, thread_id: ThreadId) -> dict[str, Any]:
        self._record("unresolve_thread", thread_id)
        self._require_thread(thread_id)
        return {"postId": thread_id, "resolved": False}

    async def mark_best_answer(
        self, thread_id: ThreadId, comment_id: CommentId
    ) -> dict[str, Any]:
        self._record("mark_best_answer", thread_id, comment_id)
        self._require_thread(thread_id)
        self.comments[thread_id] = [
            c.model_copy(update={"best_answer": c.id == comment_id})
            for c in self.comments.get(thread_id, [])
        ]
        return {"postId": thread_id, "commentId": comment_id, "bestAnswer": True}
