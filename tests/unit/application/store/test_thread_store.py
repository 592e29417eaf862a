"""Unit tests for ThreadStore."""

from datetime import timedelta

import pytest
import pytest_asyncio

from threadsync.adapter.error import TransportError
from threadsync.adapter.forum import MockForumClient
from threadsync.application.store import ThreadStore
from threadsync.config import SyncSettings
from threadsync.domain.error import ValidationError
from threadsync.domain.model import CacheEntry, ResolutionDraft
from threadsync.domain.service import find_comment
from threadsync.domain.value import CommentId, CommentType, ThreadId
from threadsync.persistence.repository.inmemory import InMemorySnapshotRepository
from threadsync.util.clock import FrozenClock
from threadsync.util.debounce import Debouncer
from tests.conftest import ManualTimer, make_comment, make_thread

PAGE_SIZE = 2


@pytest.fixture
def forum():
    return MockForumClient()


@pytest.fixture
def repository():
    return InMemorySnapshotRepository()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def timer():
    return ManualTimer()


@pytest.fixture
def store(forum, repository, clock, timer):
    settings = SyncSettings(page_size=PAGE_SIZE)
    return ThreadStore(
        forum_client=forum,
        snapshot_repository=repository,
        clock=clock,
        settings=settings,
        debouncer=Debouncer(settings.persist_debounce_seconds, timer=timer),
    )


def seed_threads(forum: MockForumClient, count: int) -> None:
    for thread_id in range(1, count + 1):
        forum.add_thread(make_thread(thread_id))


def ids(threads) -> list[int]:
    return [t.id for t in threads]


class TestInitialize:
    """Tests for ThreadStore.initialize."""

    @pytest.mark.asyncio
    async def test_fresh_snapshot_served_without_remote_call(
        self, store, forum, repository, clock
    ):
        """A snapshot younger than the TTL is used as-is."""
        # Arrange
        snapshot = (make_thread(1), make_thread(2), make_thread(3))
        repository.save(
            CacheEntry(snapshot=snapshot, last_updated=clock.now() - timedelta(minutes=4))
        )

        # Act
        threads = await store.initialize()

        # Assert
        assert threads == snapshot
        assert forum.calls == []
        assert store.current_page == 1
        assert store.has_more_pages is False
        assert store.is_loading is False

    @pytest.mark.asyncio
    async def test_full_page_snapshot_may_have_more(self, store, repository, clock):
        repository.save(
            CacheEntry(
                snapshot=(make_thread(1), make_thread(2)), last_updated=clock.now()
            )
        )

        await store.initialize()

        assert store.current_page == 0
        assert store.has_more_pages is True

    @pytest.mark.asyncio
    async def test_stale_snapshot_triggers_fetch(self, store, forum, repository, clock):
        # Arrange
        seed_threads(forum, 3)
        repository.save(
            CacheEntry(
                snapshot=(make_thread(9),),
                last_updated=clock.now() - timedelta(minutes=6),
            )
        )

        # Act
        await store.initialize()

        # Assert
        assert forum.calls == [("fetch_threads", 0, PAGE_SIZE)]
        assert ids(store.threads) == [1, 2]
        assert store.has_more_pages is True
        assert store.last_fetched_at == clock.now()

    @pytest.mark.asyncio
    async def test_failed_fetch_falls_back_to_stale_snapshot(
        self, store, forum, repository, clock
    ):
        """A remote failure is absorbed and the old snapshot is served."""
        # Arrange
        stale = (make_thread(9),)
        repository.save(
            CacheEntry(snapshot=stale, last_updated=clock.now() - timedelta(hours=1))
        )
        forum.fail_next()

        # Act
        threads = await store.initialize()

        # Assert
        assert threads == stale
        assert store.is_loading is False

    @pytest.mark.asyncio
    async def test_failed_fetch_without_snapshot_gives_empty_store(self, store, forum):
        forum.fail_next()

        threads = await store.initialize()

        assert threads == ()
        assert store.is_loading is False

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self, store, forum):
        forum.fail_next(RuntimeError("bug"))

        with pytest.raises(RuntimeError):
            await store.initialize()

        assert store.is_loading is False


class TestPagination:
    """Tests for fetch_page and load_more."""

    @pytest.mark.asyncio
    async def test_pages_append_in_order(self, store, forum):
        # Arrange
        seed_threads(forum, 5)
        await store.initialize()

        # Act
        await store.load_more()
        await store.load_more()

        # Assert
        assert ids(store.threads) == [1, 2, 3, 4, 5]
        assert store.current_page == 2
        assert store.has_more_pages is False

    @pytest.mark.asyncio
    async def test_load_more_after_last_page_is_noop(self, store, forum):
        # Arrange
        seed_threads(forum, 1)
        await store.initialize()
        calls_before = len(forum.calls)

        # Act
        result = await store.load_more()

        # Assert
        assert result is None
        assert len(forum.calls) == calls_before
        assert ids(store.threads) == [1]

    @pytest.mark.asyncio
    async def test_page_zero_replaces_collection(self, store, forum):
        # Arrange
        seed_threads(forum, 4)
        await store.initialize()
        await store.load_more()
        await store.load_comments(ThreadId(1))

        # Act
        await store.fetch_page(0)

        # Assert
        assert ids(store.threads) == [1, 2]
        assert store.current_page == 0
        assert ThreadId(1) not in store.comment_cache

    @pytest.mark.asyncio
    async def test_negative_page_rejected(self, store):
        with pytest.raises(ValidationError):
            await store.fetch_page(-1)

    @pytest.mark.asyncio
    async def test_failed_page_leaves_state_untouched(self, store, forum):
        # Arrange
        seed_threads(forum, 4)
        await store.initialize()
        before = store.threads
        forum.fail_next()

        # Act
        with pytest.raises(TransportError):
            await store.load_more()

        # Assert
        assert store.threads is before
        assert store.current_page == 0
        assert store.is_loading is False

    @pytest.mark.asyncio
    async def test_loading_flag_published_to_subscribers(self, store, forum):
        # Arrange
        seed_threads(forum, 2)
        states = []
        store.subscribe(states.append)

        # Act
        await store.fetch_page(0)

        # Assert
        assert states[0].is_loading is True
        assert states[-1].is_loading is False
        assert ids(states[-1].threads) == [1, 2]


class TestPersistence:
    """Tests for debounced snapshot writes."""

    @pytest.mark.asyncio
    async def test_write_waits_for_quiet_period(
        self, store, forum, repository, clock, timer
    ):
        # Arrange
        seed_threads(forum, 2)
        await store.initialize()
        assert repository.save_count == 0

        # Act
        fired = timer.fire()

        # Assert
        assert fired == 1
        assert repository.save_count == 1
        entry = repository.load()
        assert ids(entry.snapshot) == [1, 2]
        assert entry.last_updated == clock.now()

    @pytest.mark.asyncio
    async def test_burst_of_changes_written_once(self, store, forum, repository, timer):
        # Arrange
        seed_threads(forum, 2)
        await store.initialize()

        # Act
        store.upsert_thread(make_thread(1, title="one"))
        store.upsert_thread(make_thread(2, title="two"))
        store.upsert_thread(make_thread(3))
        timer.fire()

        # Assert
        assert repository.save_count == 1
        assert ids(repository.load().snapshot) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_dispose_cancels_pending_write(self, store, forum, repository, timer):
        # Arrange
        seed_threads(forum, 2)
        await store.initialize()

        # Act
        store.dispose()
        store.upsert_thread(make_thread(3))
        fired = timer.fire()

        # Assert
        assert fired == 0
        assert repository.save_count == 0
        assert store.disposed is True

    @pytest.mark.asyncio
    async def test_flush_writes_immediately(self, store, forum, repository, timer):
        seed_threads(forum, 1)
        await store.initialize()

        store.flush()

        assert repository.save_count == 1
        assert timer.active == []

    @pytest.mark.asyncio
    async def test_served_snapshot_not_written_back(
        self, store, repository, clock, timer
    ):
        """Serving a fresh snapshot must not schedule a write of the same data."""
        repository.save(CacheEntry(snapshot=(make_thread(1),), last_updated=clock.now()))
        saves = repository.save_count

        await store.initialize()

        assert timer.active == []
        assert repository.save_count == saves


class TestUpsertThread:
    """Tests for upsert_thread and refresh_thread."""

    def test_unknown_thread_appended(self, store):
        thread = make_thread(4)

        result = store.upsert_thread(thread)

        assert result is thread
        assert store.threads == (thread,)

    @pytest.mark.asyncio
    async def test_merge_copies_set_fields_and_keeps_comments(
        self, store, forum, clock
    ):
        # Arrange
        seed_threads(forum, 1)
        forum.add_comments(ThreadId(1), [make_comment(10)])
        await store.initialize()
        forest = await store.load_comments(ThreadId(1))
        clock.advance(timedelta(minutes=1))

        # Act
        merged = store.upsert_thread(make_thread(1, title="Renamed", comments=()))

        # Assert
        assert merged.title == "Renamed"
        assert merged.description == "What is this object?"
        assert merged.comments == forest
        assert merged.updated_at == clock.now()
        assert store.get_thread(ThreadId(1)) == merged

    @pytest.mark.asyncio
    async def test_refresh_thread_merges_details(self, store, forum):
        # Arrange
        seed_threads(forum, 1)
        await store.initialize()
        forum.add_thread(make_thread(1, title="Edited upstream", upvotes=7))

        # Act
        refreshed = await store.refresh_thread(ThreadId(1))

        # Assert
        assert refreshed.title == "Edited upstream"
        assert store.get_thread(ThreadId(1)).upvotes == 7


class TestVoteThread:
    """Tests for vote_thread."""

    @pytest.mark.asyncio
    async def test_success_changes_only_vote_fields(self, store, forum):
        # Arrange
        forum.add_thread(make_thread(1, downvotes=2, user_downvoted=True))
        await store.initialize()
        before = store.get_thread(ThreadId(1))

        # Act
        tally = await store.vote_thread(ThreadId(1), True)

        # Assert
        assert (tally.upvotes, tally.downvotes) == (1, 2)
        assert store.get_thread(ThreadId(1)) == before.model_copy(
            update={
                "upvotes": 1,
                "downvotes": 2,
                "user_upvoted": True,
                "user_downvoted": False,
            }
        )

    @pytest.mark.asyncio
    async def test_failure_leaves_state_untouched(self, store, forum, timer):
        # Arrange
        seed_threads(forum, 1)
        await store.initialize()
        timer.fire()
        before = store.threads
        forum.fail_next()

        # Act
        with pytest.raises(TransportError):
            await store.vote_thread(ThreadId(1), True)

        # Assert
        assert store.threads is before
        assert timer.active == []


class TestResolution:
    """Tests for resolve_post and unresolve_post."""

    @pytest.mark.asyncio
    async def test_resolve_then_unresolve(self, store, forum, clock):
        # Arrange
        seed_threads(forum, 1)
        await store.initialize()

        # Act
        await store.resolve_post(
            ThreadId(1),
            ResolutionDraft(
                description="Wall anchor", contributing_comment_ids=(CommentId(3),)
            ),
        )
        resolved = store.get_thread(ThreadId(1))
        await store.unresolve_post(ThreadId(1))
        reopened = store.get_thread(ThreadId(1))

        # Assert
        assert resolved.solved is True
        assert resolved.resolution.description == "Wall anchor"
        assert resolved.resolution.contributing_comment_ids == (3,)
        assert resolved.resolution.resolved_at == clock.now()
        assert reopened.solved is False
        assert reopened.resolution is None

    @pytest.mark.asyncio
    async def test_resolve_failure_keeps_thread_open(self, store, forum):
        seed_threads(forum, 1)
        await store.initialize()
        forum.fail_next()

        with pytest.raises(TransportError):
            await store.resolve_post(ThreadId(1), ResolutionDraft(description="x"))

        assert store.get_thread(ThreadId(1)).solved is False


class TestComments:
    """Tests for comment loading, creation, votes and best answer."""

    @pytest_asyncio.fixture
    async def loaded(self, store, forum):
        """Thread 1 with comments 10, 11 (reply to 10) and 12."""
        seed_threads(forum, 1)
        forum.add_comments(
            ThreadId(1),
            [
                make_comment(10, post_id=1),
                make_comment(11, 10, post_id=1),
                make_comment(12, post_id=1),
            ],
        )
        await store.initialize()
        await store.load_comments(ThreadId(1))
        return store

    @pytest.mark.asyncio
    async def test_load_comments_builds_and_caches(self, store, forum):
        # Arrange
        seed_threads(forum, 1)
        forum.add_comments(ThreadId(1), [make_comment(10), make_comment(11, 10)])
        await store.initialize()

        # Act
        first = await store.load_comments(ThreadId(1))
        second = await store.load_comments(ThreadId(1))

        # Assert
        assert second is first
        assert [c for c in forum.calls if c[0] == "fetch_comments"] == [
            ("fetch_comments", ThreadId(1))
        ]
        assert store.get_thread(ThreadId(1)).comments == first
        assert first[0].replies[0].id == 11

    @pytest.mark.asyncio
    async def test_force_reload_refetches(self, store, forum):
        seed_threads(forum, 1)
        await store.initialize()
        await store.load_comments(ThreadId(1))
        forum.add_comments(ThreadId(1), [make_comment(10)])

        forest = await store.load_comments(ThreadId(1), force=True)

        assert [n.id for n in forest] == [10]

    @pytest.mark.asyncio
    async def test_add_top_level_comment(self, store, forum):
        # Arrange
        seed_threads(forum, 1)
        await store.initialize()
        await store.load_comments(ThreadId(1))

        # Act
        comment = await store.add_comment(
            ThreadId(1), "Looks like brass", comment_type=CommentType.SUGGESTION
        )

        # Assert
        roots = store.get_thread(ThreadId(1)).comments
        assert [n.id for n in roots] == [comment.id]
        assert roots[0].comment.comment_type is CommentType.SUGGESTION

    @pytest.mark.asyncio
    async def test_add_reply_nests_under_parent(self, loaded):
        # Act
        reply = await loaded.add_comment(
            ThreadId(1), "Agreed", parent_comment_id=CommentId(11)
        )

        # Assert
        forest = loaded.get_thread(ThreadId(1)).comments
        parent = find_comment(forest, CommentId(11))
        assert [n.id for n in parent.replies] == [reply.id]

    @pytest.mark.asyncio
    async def test_add_comment_invalidates_cached_forest(self, loaded, forum):
        """The next load must include the new comment."""
        # Arrange
        assert ThreadId(1) in loaded.comment_cache

        # Act
        reply = await loaded.add_comment(
            ThreadId(1), "Agreed", parent_comment_id=CommentId(10)
        )

        # Assert
        assert ThreadId(1) not in loaded.comment_cache
        forest = await loaded.load_comments(ThreadId(1))
        assert find_comment(forest, reply.id) is not None

    @pytest.mark.asyncio
    async def test_reply_to_unloaded_parent_left_out(self, loaded):
        before = loaded.get_thread(ThreadId(1)).comments

        await loaded.add_comment(ThreadId(1), "?", parent_comment_id=CommentId(404))

        assert loaded.get_thread(ThreadId(1)).comments == before

    @pytest.mark.asyncio
    async def test_vote_comment_patches_nested_counts(self, loaded):
        # Act
        tally = await loaded.vote_comment(CommentId(11), True)

        # Assert
        node = find_comment(loaded.get_thread(ThreadId(1)).comments, CommentId(11))
        assert node.comment.upvotes == tally.upvotes == 1
        assert node.comment.user_upvoted is True
        assert node.comment.user_downvoted is False
        assert ThreadId(1) not in loaded.comment_cache

    @pytest.mark.asyncio
    async def test_vote_comment_failure_leaves_state_untouched(self, loaded, forum):
        before = loaded.threads
        forum.fail_next()

        with pytest.raises(TransportError):
            await loaded.vote_comment(CommentId(11), False)

        assert loaded.threads is before
        assert ThreadId(1) in loaded.comment_cache

    @pytest.mark.asyncio
    async def test_mark_best_answer_toggles_top_level(self, loaded):
        # Arrange
        await loaded.mark_best_answer(ThreadId(1), CommentId(10))

        # Act
        await loaded.mark_best_answer(ThreadId(1), CommentId(12))

        # Assert
        roots = loaded.get_thread(ThreadId(1)).comments
        assert [(n.id, n.comment.best_answer) for n in roots] == [
            (10, False),
            (12, True),
        ]
        assert ThreadId(1) not in loaded.comment_cache


class TestObservation:
    """Tests for subscribe, state and reset."""

    def test_unsubscribe_stops_notifications(self, store):
        states = []
        unsubscribe = store.subscribe(states.append)

        store.upsert_thread(make_thread(1))
        unsubscribe()
        store.upsert_thread(make_thread(2))

        assert len(states) == 1
        assert ids(states[0].threads) == [1]

    def test_failing_subscriber_does_not_break_store(self, store):
        def broken(state):
            raise RuntimeError("listener bug")

        states = []
        store.subscribe(broken)
        store.subscribe(states.append)

        store.upsert_thread(make_thread(1))

        assert len(states) == 1
        assert ids(store.threads) == [1]

    @pytest.mark.asyncio
    async def test_reset_clears_everything(self, store, forum):
        seed_threads(forum, 4)
        await store.initialize()
        await store.load_more()

        store.reset()

        assert store.state.threads == ()
        assert store.current_page == 0
        assert store.has_more_pages is True
        assert store.last_fetched_at is None


class TestDefaultDebouncer:
    """Tests for a store built with its default debouncer."""

    def test_sync_operations_work_outside_event_loop(self, forum, repository, clock):
        # Arrange
        store = ThreadStore(
            forum_client=forum,
            snapshot_repository=repository,
            clock=clock,
            settings=SyncSettings(),
        )

        # Act
        store.upsert_thread(make_thread(1))
        store.reset()
        store.upsert_thread(make_thread(2))

        # Assert
        assert ids(store.threads) == [2]
        assert store.debouncer.pending is True
        assert repository.save_count == 0

    def test_flush_writes_change_made_outside_event_loop(
        self, forum, repository, clock
    ):
        store = ThreadStore(
            forum_client=forum,
            snapshot_repository=repository,
            clock=clock,
            settings=SyncSettings(),
        )
        store.upsert_thread(make_thread(1))

        store.flush()

        assert ids(repository.load().snapshot) == [1]


class TestNotification:
    """Tests for state pushed to subscribers by store operations."""

    @pytest.mark.asyncio
    async def test_initialize_notifies_with_fetched_threads(self, store, forum):
        # Arrange
        seed_threads(forum, 3)
        states = []
        store.subscribe(states.append)

        # Act
        await store.initialize()

        # Assert
        assert states
        assert ids(states[-1].threads) == [1, 2]
        assert states[-1].has_more_pages is True
        assert states[-1].is_loading is False

    @pytest.mark.asyncio
    async def test_served_snapshot_notifies(self, store, repository, clock):
        repository.save(CacheEntry(snapshot=(make_thread(7),), last_updated=clock.now()))
        states = []
        store.subscribe(states.append)

        await store.initialize()

        assert ids(states[-1].threads) == [7]
