"""Paginated thread store.

Owns the local copy of the thread collection and keeps it in sync with the
forum API. Remote calls are awaited before local state changes; nothing is
applied optimistically. Every change to the collection schedules a debounced
write of the snapshot, and reads never wait on storage.

Concurrency: the store is used from a single asyncio loop without locks.
Overlapping calls interleave and whichever response lands last wins for the
state it touches. Callers must not request a page that is already loaded.
"""

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Optional

import logfire

from threadsync.adapter.error import AdapterError
from threadsync.application.store.observer import Listener, StateObservers
from threadsync.application.store.state import StoreState
from threadsync.config import SyncSettings
from threadsync.domain.error import ValidationError
from threadsync.domain.model import (
    CacheEntry,
    Comment,
    CommentDraft,
    CommentForest,
    CommentNode,
    Resolution,
    ResolutionDraft,
    Thread,
    ThreadPage,
    VoteTally,
)
from threadsync.domain.repository import SnapshotRepository
from threadsync.domain.service import (
    CommentResultCache,
    ForumClient,
    FreshnessPolicy,
    build_comment_tree,
    find_comment,
    insert_reply,
    mark_top_level_best_answer,
    update_comment_fields,
)
from threadsync.domain.value import CommentId, CommentType, ThreadId
from threadsync.util.clock import Clock
from threadsync.util.debounce import Debouncer

ThreadUpdate = Callable[[Thread], Thread]


class ThreadStore:
    """Local, observable copy of the paginated thread collection.

    Attributes:
        page_size: Fixed number of threads requested per page
        comment_cache: Built comment forests per thread
    """

    def __init__(
        self,
        forum_client: ForumClient,
        snapshot_repository: SnapshotRepository,
        clock: Clock,
        settings: SyncSettings,
        debouncer: Debouncer | None = None,
        comment_cache: CommentResultCache | None = None,
    ) -> None:
        """Initialize thread store.

        Args:
            forum_client: Remote forum API
            snapshot_repository: Durable mirror of the collection
            clock: Time source for freshness and ``updated_at`` stamps
            settings: Page size, snapshot TTL and write debounce delay
            debouncer: Write debouncer, built from settings when omitted
            comment_cache: Comment forest cache, fresh when omitted
        """
        self.forum_client = forum_client
        self.snapshot_repository = snapshot_repository
        self.clock = clock
        self.page_size = settings.page_size
        self.freshness = FreshnessPolicy(settings.cache_ttl)
        self.debouncer = debouncer or Debouncer(settings.persist_debounce_seconds)
        self.comment_cache = comment_cache or CommentResultCache()

        self._threads: tuple[Thread, ...] = ()
        self._current_page = 0
        self._has_more_pages = True
        self._loading = 0
        self._last_fetched_at: datetime | None = None
        self._observers = StateObservers()
        self._disposed = False

    # Current values

    @property
    def threads(self) -> tuple[Thread, ...]:
        return self._threads

    @property
    def is_loading(self) -> bool:
        return self._loading > 0

    @property
    def has_more_pages(self) -> bool:
        return self._has_more_pages

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def last_fetched_at(self) -> datetime | None:
        """Time of the last successful page-0 fetch."""
        return self._last_fetched_at

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def state(self) -> StoreState:
        return StoreState(
            threads=self._threads,
            is_loading=self.is_loading,
            has_more_pages=self._has_more_pages,
            current_page=self._current_page,
        )

    def get_thread(self, thread_id: ThreadId) -> Optional[Thread]:
        index = self._index_of(thread_id)
        return None if index is None else self._threads[index]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Get notified with a new ``StoreState`` after every change.

        Returns:
            Function that removes the listener
        """
        return self._observers.subscribe(listener)

    # Lifecycle

    async def initialize(self) -> tuple[Thread, ...]:
        """Populate the store from the snapshot or the first page.

        A fresh snapshot is served without any remote call. Otherwise page 0
        is fetched; if that fails the persisted snapshot, stale or empty, is
        loaded instead and the error is not raised. Callers seeing an empty or
        old collection after a failure get best-effort data.

        Returns:
            The threads now held by the store
        """
        with logfire.span("thread_store.initialize"), self._loading_scope():
            entry = self.snapshot_repository.load()
            if self.freshness.is_usable(entry, self.clock.now()):
                self._restore(entry)
                logfire.info(
                    "Serving fresh snapshot",
                    count=len(self._threads),
                    last_updated=str(entry.last_updated),
                )
                return self._threads

            try:
                await self._fetch_page(0)
            except AdapterError as e:
                logfire.warn(
                    "Initial fetch failed, falling back to snapshot",
                    error=str(e),
                    cached=len(entry.snapshot) if entry else 0,
                )
                self._restore(entry or CacheEntry())
            return self._threads

    def dispose(self) -> None:
        """Stop the store: drop the pending write and all subscribers."""
        self.debouncer.cancel()
        self._observers.clear()
        self._disposed = True
        logfire.info("Thread store disposed", count=len(self._threads))

    def flush(self) -> None:
        """Write the snapshot now instead of waiting for the debounce."""
        if self._disposed:
            return
        self.debouncer.cancel()
        self._persist()

    def reset(self) -> None:
        """Drop every thread and start again from page 0."""
        self._current_page = 0
        self._has_more_pages = True
        self._last_fetched_at = None
        self.comment_cache.clear()
        self._set_threads(())
        logfire.info("Thread store reset")

    # Pagination

    async def fetch_page(self, page: int) -> ThreadPage:
        """Fetch a page and merge it into the collection.

        Page 0 replaces the collection, any other page is appended as-is.
        Threads are not de-duplicated.

        Args:
            page: Zero-based page index

        Returns:
            The fetched page

        Raises:
            TransportError: If the remote call fails
            ValidationError: If ``page`` is negative
        """
        with logfire.span("thread_store.fetch_page", page=page), self._loading_scope():
            return await self._fetch_page(page)

    async def load_more(self) -> Optional[ThreadPage]:
        """Fetch the page after the current one.

        Returns:
            The fetched page, or None when there are no more pages
        """
        if not self._has_more_pages:
            logfire.info("No more pages to load", current_page=self._current_page)
            return None
        return await self.fetch_page(self._current_page + 1)

    async def _fetch_page(self, page: int) -> ThreadPage:
        if page < 0:
            raise ValidationError(f"Page index must not be negative: {page}")

        result = await self.forum_client.fetch_threads(page, self.page_size)

        if page == 0:
            threads = result.items
            self._last_fetched_at = self.clock.now()
            self.comment_cache.clear()
        else:
            threads = (*self._threads, *result.items)

        self._current_page = page
        self._has_more_pages = not result.is_last_page
        self._set_threads(threads)

        logfire.info(
            "Page merged",
            page=page,
            received=len(result.items),
            total=len(self._threads),
            has_more_pages=self._has_more_pages,
        )
        return result

    # Thread updates

    def upsert_thread(self, thread: Thread) -> Thread:
        """Merge ``thread`` into the collection.

        For a known id, the fields explicitly set on ``thread`` are copied over
        the stored thread, except ``comments``, which only comment operations
        may replace; ``updated_at`` is stamped with the current time. An
        unknown thread is appended unchanged.

        Returns:
            The stored thread after the merge
        """
        index = self._index_of(thread.id)
        if index is None:
            self._set_threads((*self._threads, thread))
            logfire.info("Thread added", thread_id=thread.id)
            return thread

        changes: dict[str, Any] = {
            name: getattr(thread, name)
            for name in thread.model_fields_set
            if name not in ("id", "comments")
        }
        changes["updated_at"] = self.clock.now()
        merged = self._threads[index].model_copy(update=changes)
        self._replace_at(index, merged)
        logfire.info("Thread merged", thread_id=thread.id, fields=sorted(changes))
        return merged

    async def refresh_thread(self, thread_id: ThreadId) -> Thread:
        """Refetch a thread's details and merge them in.

        Raises:
            TransportError: If the remote call fails
        """
        with logfire.span("thread_store.refresh_thread", thread_id=thread_id):
            thread = await self.forum_client.fetch_thread(thread_id)
            return self.upsert_thread(thread)

    async def vote_thread(self, thread_id: ThreadId, is_upvote: bool) -> VoteTally:
        """Vote on a thread, then apply the server's counts.

        Only ``upvotes``, ``downvotes``, ``user_upvoted`` and
        ``user_downvoted`` change, and only after the server confirms.

        Raises:
            TransportError: If the remote call fails; local state is untouched
        """
        with logfire.span(
            "thread_store.vote_thread", thread_id=thread_id, is_upvote=is_upvote
        ):
            tally = await self.forum_client.vote_thread(thread_id, is_upvote)
            self._update_thread(
                thread_id,
                lambda thread: thread.model_copy(
                    update={
                        "upvotes": tally.upvotes,
                        "downvotes": tally.downvotes,
                        "user_upvoted": is_upvote,
                        "user_downvoted": not is_upvote,
                    }
                ),
            )
            return tally

    async def resolve_post(
        self, thread_id: ThreadId, resolution: ResolutionDraft
    ) -> dict[str, Any]:
        """Mark a thread as solved.

        Raises:
            TransportError: If the remote call fails
        """
        with logfire.span("thread_store.resolve_post", thread_id=thread_id):
            ack = await self.forum_client.resolve_thread(thread_id, resolution)
            self.comment_cache.invalidate(thread_id)
            resolved = Resolution(
                description=resolution.description,
                contributing_comment_ids=resolution.contributing_comment_ids,
                resolved_at=self.clock.now(),
            )
            self._update_thread(
                thread_id,
                lambda thread: thread.model_copy(
                    update={"solved": True, "resolution": resolved}
                ),
            )
            return ack

    async def unresolve_post(self, thread_id: ThreadId) -> dict[str, Any]:
        """Reopen a solved thread.

        Raises:
            TransportError: If the remote call fails
        """
        with logfire.span("thread_store.unresolve_post", thread_id=thread_id):
            ack = await self.forum_client.unresolve_thread(thread_id)
            self.comment_cache.invalidate(thread_id)
            self._update_thread(
                thread_id,
                lambda thread: thread.model_copy(
                    update={"solved": False, "resolution": None}
                ),
            )
            return ack

    # Comments

    async def load_comments(
        self, thread_id: ThreadId, force: bool = False
    ) -> CommentForest:
        """Return a thread's comment forest, fetching and building on a miss.

        A fetched forest replaces the thread's ``comments`` wholesale.

        Args:
            thread_id: Thread whose comments are requested
            force: Skip the cache and refetch

        Raises:
            TransportError: If the remote call fails
        """
        if not force:
            cached = self.comment_cache.get(thread_id)
            if cached is not None:
                return cached

        with logfire.span("thread_store.load_comments", thread_id=thread_id):
            comments = await self.forum_client.fetch_comments(thread_id)
            forest = build_comment_tree(comments)
            self.comment_cache.put(thread_id, forest)
            self._update_thread(
                thread_id,
                lambda thread: thread.model_copy(update={"comments": forest}),
                missing_ok=True,
            )
            logfire.info(
                "Comments loaded",
                thread_id=thread_id,
                count=len(comments),
                roots=len(forest),
            )
            return forest

    async def add_comment(
        self,
        thread_id: ThreadId,
        content: str,
        parent_comment_id: CommentId | None = None,
        comment_type: CommentType | None = None,
    ) -> Comment:
        """Create a comment and insert it into the thread's forest.

        Top-level comments are appended as roots. Replies are appended to
        their parent wherever it sits in the tree; when the parent is not in
        the loaded forest the reply is left out of the tree and logged.

        Returns:
            The comment as created by the server

        Raises:
            TransportError: If the remote call fails
        """
        draft = CommentDraft(
            post_id=thread_id,
            content=content,
            parent_comment_id=parent_comment_id,
            comment_type=comment_type,
        )
        with logfire.span(
            "thread_store.add_comment",
            thread_id=thread_id,
            parent_comment_id=parent_comment_id,
        ):
            comment = await self.forum_client.create_comment(draft)
            self.comment_cache.invalidate(thread_id)
            node = CommentNode(comment=comment)

            def attach(thread: Thread) -> Thread:
                forest = thread.comments or ()
                if parent_comment_id is None:
                    return thread.model_copy(update={"comments": (*forest, node)})
                patched, found = insert_reply(forest, parent_comment_id, node)
                if not found:
                    logfire.warn(
                        "Parent comment not loaded, reply left out of tree",
                        thread_id=thread_id,
                        comment_id=comment.id,
                        parent_comment_id=parent_comment_id,
                    )
                    return thread
                return thread.model_copy(update={"comments": patched})

            self._update_thread(thread_id, attach)
            return comment

    async def vote_comment(self, comment_id: CommentId, is_upvote: bool) -> VoteTally:
        """Vote on a comment, then patch its counts in place.

        The owning thread's forest is patched along the path to the comment
        and any cached forest holding the comment is invalidated.

        Raises:
            TransportError: If the remote call fails; local state is untouched
        """
        with logfire.span(
            "thread_store.vote_comment", comment_id=comment_id, is_upvote=is_upvote
        ):
            tally = await self.forum_client.vote_comment(comment_id, is_upvote)
            self.comment_cache.invalidate_comment(comment_id)

            changes = {
                "upvotes": tally.upvotes,
                "downvotes": tally.downvotes,
                "user_upvoted": is_upvote,
                "user_downvoted": not is_upvote,
            }
            owner = self._thread_containing(comment_id)
            if owner is None:
                logfire.warn("Voted comment not in local state", comment_id=comment_id)
                return tally

            self.comment_cache.invalidate(owner.id)
            self._update_thread(
                owner.id,
                lambda thread: thread.model_copy(
                    update={
                        "comments": update_comment_fields(
                            thread.comments or (), comment_id, **changes
                        )
                    }
                ),
            )
            return tally

    async def mark_best_answer(
        self, thread_id: ThreadId, comment_id: CommentId
    ) -> dict[str, Any]:
        """Mark a top-level comment as the thread's best answer.

        Exactly the matching top-level comment ends up flagged; its top-level
        siblings are cleared. Nested replies are never toggled, so a reply
        flagged earlier keeps its flag.

        Raises:
            TransportError: If the remote call fails
        """
        with logfire.span(
            "thread_store.mark_best_answer", thread_id=thread_id, comment_id=comment_id
        ):
            ack = await self.forum_client.mark_best_answer(thread_id, comment_id)
            self.comment_cache.invalidate(thread_id)

            def toggle(thread: Thread) -> Thread:
                if thread.comments is None:
                    return thread
                return thread.model_copy(
                    update={
                        "comments": mark_top_level_best_answer(
                            thread.comments, comment_id
                        )
                    }
                )

            self._update_thread(thread_id, toggle)
            return ack

    # Internals

    @contextmanager
    def _loading_scope(self) -> Iterator[None]:
        self._loading += 1
        self._notify()
        try:
            yield
        finally:
            self._loading -= 1
            self._notify()

    def _index_of(self, thread_id: ThreadId) -> Optional[int]:
        for index, thread in enumerate(self._threads):
            if thread.id == thread_id:
                return index
        return None

    def _thread_containing(self, comment_id: CommentId) -> Optional[Thread]:
        for thread in self._threads:
            if thread.comments and find_comment(thread.comments, comment_id) is not None:
                return thread
        return None

    def _update_thread(
        self, thread_id: ThreadId, update: ThreadUpdate, missing_ok: bool = False
    ) -> Optional[Thread]:
        index = self._index_of(thread_id)
        if index is None:
            if not missing_ok:
                logfire.warn("Thread not in local state, update skipped", thread_id=thread_id)
            return None
        current = self._threads[index]
        updated = update(current)
        if updated is not current:
            self._replace_at(index, updated)
        return updated

    def _replace_at(self, index: int, thread: Thread) -> None:
        threads = list(self._threads)
        threads[index] = thread
        self._set_threads(threads)

    def _set_threads(self, threads: Iterable[Thread]) -> None:
        self._threads = tuple(threads)
        self._schedule_persist()
        self._notify()

    def _restore(self, entry: CacheEntry) -> None:
        """Load a persisted snapshot without writing it back."""
        self._threads = entry.snapshot
        self._last_fetched_at = entry.last_updated
        self.comment_cache.clear()
        # The snapshot does not record the cursor; derive it from its size
        count = len(entry.snapshot)
        self._current_page = max(0, -(-count // self.page_size) - 1)
        self._has_more_pages = count % self.page_size == 0
        self._notify()

    def _notify(self) -> None:
        self._observers.notify(self.state)

    def _schedule_persist(self) -> None:
        if self._disposed:
            return
        self.debouncer.schedule(self._persist)

    def _persist(self) -> None:
        self.snapshot_repository.save(
            CacheEntry(snapshot=self._threads, last_updated=self._last_fetched_at)
        )
