"""Unit tests for the orphan deletion strategies."""

from unittest.mock import MagicMock

import pytest

from reclamation.application.strategies import (
    BatchStrategy,
    CronStrategy,
    SimpleStrategy,
    create_strategy,
)
from reclamation.domain.value_objects import ContentId, OrphanCandidate
from reclamation.infrastructure.content_store import InMemoryContentStore
from reclamation.ports.exceptions import ProcessingError, StorageError


class FlakyContentStore(InMemoryContentStore):
    """Content store whose writes fail for selected content."""

    def __init__(self) -> None:
        super().__init__()
        self.failures: dict[ContentId, int] = {}

    def _maybe_fail(self, content_id: ContentId) -> None:
        remaining = self.failures.get(content_id, 0)
        if remaining:
            self.failures[content_id] = remaining - 1
            raise StorageError(f"content store unavailable for {content_id}")

    async def delete(self, content_id):
        self._maybe_fail(content_id)
        return await super().delete(content_id)

    async def set_references(self, content_id, group_ids):
        self._maybe_fail(content_id)
        return await super().set_references(content_id, group_ids)


class FakeClock:
    """Clock advancing one second per reading."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        self.now += 1.0
        return self.now


@pytest.fixture
def store() -> FlakyContentStore:
    """Provide an empty flaky content store."""
    return FlakyContentStore()


@pytest.fixture
def mock_probe() -> MagicMock:
    """Provide a mock reclamation probe."""
    return MagicMock()


async def _seed(index, store, group_ids, *names) -> list[OrphanCandidate]:
    """Create content referencing group_ids; return candidates for the first group."""
    candidates = []
    for name in names:
        content_id = ContentId(name)
        await store.put(content_id, list(group_ids))
        await index.index_content(content_id, group_ids)
        candidates.append(
            OrphanCandidate(content_id, group_ids[0], orphaned=len(group_ids) == 1)
        )
    return candidates


class TestFactory:
    """Tests for create_strategy."""

    @pytest.mark.parametrize(
        "plugin_id,expected",
        [("simple", SimpleStrategy), ("batch", BatchStrategy), ("cron", CronStrategy)],
    )
    def test_creates_by_plugin_id(
        self, orphan_queue, content_index, store, plugin_id, expected
    ):
        """Each plugin id selects its strategy."""
        strategy = create_strategy(plugin_id, orphan_queue, content_index, store)

        assert type(strategy) is expected
        assert strategy.deferred is (plugin_id == "cron")

    def test_unknown_plugin_id(self, orphan_queue, content_index, store):
        """Unknown ids raise ValueError."""
        with pytest.raises(ValueError, match="orphan deletion strategy"):
            create_strategy("hourly", orphan_queue, content_index, store)

    def test_batch_size_must_be_positive(self, orphan_queue, content_index, store):
        """A batch size below one is refused."""
        with pytest.raises(ValueError):
            create_strategy("batch", orphan_queue, content_index, store, batch_size=0)


class TestReclaim:
    """Tests for the shared reclaim step."""

    @pytest.mark.asyncio
    async def test_relinks_content_with_other_groups(
        self, orphan_queue, content_index, store, group, other_group
    ):
        """Content in two groups only loses the deleted one."""
        [candidate] = await _seed(
            content_index, store, [group.id, other_group.id], "shared"
        )
        strategy = SimpleStrategy(orphan_queue, content_index, store)

        await strategy.register([candidate])
        result = await strategy.process()

        assert result.relinked == 1
        assert await store.references(ContentId("shared")) == [other_group.id]
        assert await content_index.references_of(ContentId("shared")) == [
            other_group.id
        ]

    @pytest.mark.asyncio
    async def test_skips_content_already_unlinked(
        self, orphan_queue, content_index, store, group, other_group
    ):
        """Content re-indexed away from the group is left alone."""
        [candidate] = await _seed(content_index, store, [group.id], "moved")
        await content_index.index_content(ContentId("moved"), [other_group.id])
        strategy = SimpleStrategy(orphan_queue, content_index, store)

        await strategy.register([candidate])
        result = await strategy.process()

        assert result.skipped == 1
        assert await store.exists(ContentId("moved"))

    @pytest.mark.asyncio
    async def test_malformed_entries_are_dead_lettered(
        self, orphan_queue, content_index, store, group, mock_probe
    ):
        """Payloads that cannot be decoded are parked, not retried."""
        candidates = await _seed(content_index, store, [group.id], "a")
        await orphan_queue.enqueue([{"content_id": "x"}])
        strategy = SimpleStrategy(orphan_queue, content_index, store, mock_probe)

        await strategy.register(candidates)
        result = await strategy.process()

        assert result.deleted == 1
        assert result.finished
        assert len(orphan_queue.dead_letters()) == 1
        mock_probe.malformed_candidate.assert_called_once()


class TestSimpleStrategy:
    """Tests for SimpleStrategy."""

    @pytest.mark.asyncio
    async def test_drains_queue(self, orphan_queue, content_index, store, group):
        """One call deletes every orphan."""
        candidates = await _seed(content_index, store, [group.id], "a", "b", "c")
        strategy = SimpleStrategy(orphan_queue, content_index, store)

        assert await strategy.register(candidates) == 3
        result = await strategy.process()

        assert (result.handled, result.deleted, result.remaining) == (3, 3, 0)
        assert result.finished
        assert not await store.exists(ContentId("b"))

    @pytest.mark.asyncio
    async def test_failure_keeps_finished_work(
        self, orphan_queue, content_index, store, group, mock_probe
    ):
        """Work done before a failure stays done; the rest stays queued."""
        candidates = await _seed(content_index, store, [group.id], "a", "b", "c")
        store.failures[ContentId("b")] = 1
        strategy = SimpleStrategy(orphan_queue, content_index, store, mock_probe)
        await strategy.register(candidates)

        with pytest.raises(ProcessingError) as exc_info:
            await strategy.process()

        assert exc_info.value.result.handled == 1
        assert await strategy.pending() == 2
        mock_probe.sweep_failed.assert_called_once()

        result = await strategy.process()
        assert result.deleted == 2
        assert result.finished


class TestBatchStrategy:
    """Tests for BatchStrategy."""

    @pytest.mark.asyncio
    async def test_processes_one_chunk_per_call(
        self, orphan_queue, content_index, store, group
    ):
        """Callers loop until the result reports finished."""
        candidates = await _seed(
            content_index, store, [group.id], "a", "b", "c", "d", "e"
        )
        strategy = BatchStrategy(orphan_queue, content_index, store, batch_size=2)
        await strategy.register(candidates)

        first = await strategy.process()
        assert (first.handled, first.remaining, first.finished) == (2, 3, False)
        assert strategy.progress.percentage == 40.0

        calls = 1
        result = first
        while not result.finished:
            result = await strategy.process()
            calls += 1

        assert calls == 3
        assert strategy.progress.finished
        assert strategy.progress.percentage == 100.0

    @pytest.mark.asyncio
    async def test_failure_releases_whole_chunk(
        self, orphan_queue, content_index, store, group
    ):
        """A failed chunk is retried from its start, which is safe."""
        candidates = await _seed(content_index, store, [group.id], "a", "b", "c")
        store.failures[ContentId("b")] = 1
        strategy = BatchStrategy(orphan_queue, content_index, store, batch_size=3)
        await strategy.register(candidates)

        with pytest.raises(ProcessingError):
            await strategy.process()
        assert await strategy.pending() == 3
        assert strategy.progress.processed == 0

        result = await strategy.process()

        assert (result.deleted, result.skipped) == (2, 1)
        assert result.finished
        assert strategy.progress.percentage == 100.0


class TestCronStrategy:
    """Tests for CronStrategy."""

    @pytest.mark.asyncio
    async def test_item_limit(self, orphan_queue, content_index, store, group):
        """A run stops after item_limit candidates."""
        candidates = await _seed(content_index, store, [group.id], "a", "b", "c")
        strategy = CronStrategy(orphan_queue, content_index, store, item_limit=2)
        await strategy.register(candidates)

        result = await strategy.process()

        assert (result.handled, result.remaining, result.finished) == (2, 1, False)

    @pytest.mark.asyncio
    async def test_time_limit(self, orphan_queue, content_index, store, group):
        """A run stops at its deadline and leaves the rest queued."""
        candidates = await _seed(content_index, store, [group.id], "a", "b", "c")
        strategy = CronStrategy(
            orphan_queue,
            content_index,
            store,
            time_limit_seconds=2.5,
            clock=FakeClock(),
        )
        await strategy.register(candidates)

        result = await strategy.process()

        assert result.handled == 1
        assert await strategy.pending() == 2

    @pytest.mark.asyncio
    async def test_failed_candidate_moves_to_tail(
        self, orphan_queue, content_index, store, group
    ):
        """A failing candidate is retried after the rest of the queue."""
        candidates = await _seed(content_index, store, [group.id], "a", "b", "c")
        store.failures[ContentId("b")] = 1
        strategy = CronStrategy(orphan_queue, content_index, store)
        await strategy.register(candidates)

        with pytest.raises(ProcessingError):
            await strategy.process()

        items = await orphan_queue.claim(5)
        assert [item.payload["content_id"] for item in items] == ["c", "b"]
        assert items[1].attempts == 1
        await orphan_queue.release(items)

    @pytest.mark.asyncio
    async def test_dead_letters_after_max_retries(
        self, orphan_queue, content_index, store, group, mock_probe
    ):
        """A candidate failing max_retries times is dead-lettered."""
        candidates = await _seed(content_index, store, [group.id], "stuck")
        store.failures[ContentId("stuck")] = 10
        strategy = CronStrategy(
            orphan_queue, content_index, store, mock_probe, max_retries=2
        )
        await strategy.register(candidates)

        for _ in range(2):
            with pytest.raises(ProcessingError):
                await strategy.process()

        assert await strategy.pending() == 0
        [dead] = orphan_queue.dead_letters()
        assert dead.attempts == 2
        mock_probe.candidate_dead_lettered.assert_called_once()
        assert (await strategy.process()).finished


@pytest.mark.parametrize("plugin_id", ["simple", "batch", "cron"])
class TestQueueFailures:
    """Queue failures surface as ProcessingError from every strategy."""

    @pytest.mark.asyncio
    async def test_claim_failure(
        self, failing_queue, content_index, store, group, plugin_id
    ):
        """A queue that cannot be claimed from stops the sweep cleanly."""
        candidates = await _seed(content_index, store, [group.id], "a")
        strategy = create_strategy(plugin_id, failing_queue, content_index, store)
        await strategy.register(candidates)
        failing_queue.failing.add("claim")

        with pytest.raises(ProcessingError) as exc_info:
            await strategy.process()

        assert exc_info.value.result.handled == 0
        failing_queue.failing.discard("claim")
        assert (await strategy.process()).deleted == 1

    @pytest.mark.asyncio
    async def test_size_failure_after_reclaiming(
        self, failing_queue, content_index, store, group, plugin_id
    ):
        """Work already acknowledged is reported when the queue size is unknown."""
        candidates = await _seed(content_index, store, [group.id], "a")
        strategy = create_strategy(plugin_id, failing_queue, content_index, store)
        await strategy.register(candidates)
        failing_queue.failing.add("size")

        with pytest.raises(ProcessingError) as exc_info:
            await strategy.process()

        assert exc_info.value.result.handled == 1
        assert not await store.exists(ContentId("a"))

    @pytest.mark.asyncio
    async def test_release_failure_after_reclaim_failure(
        self, failing_queue, content_index, store, group, plugin_id
    ):
        """A failed release does not leak a raw StorageError."""
        candidates = await _seed(content_index, store, [group.id], "a", "b")
        store.failures[ContentId("a")] = 1
        strategy = create_strategy(plugin_id, failing_queue, content_index, store)
        await strategy.register(candidates)
        failing_queue.failing.add("release")

        with pytest.raises(ProcessingError):
            await strategy.process()
