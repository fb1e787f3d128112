"""Unit tests for EventDispatcher."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from shared_kernel.events import EventDispatcher, GroupDeleted
from shared_kernel.exceptions import StorageError
from shared_kernel.identifiers import GroupId, GroupRef


@pytest.fixture
def mock_probe():
    """Create mock dispatcher probe."""
    return MagicMock()


@pytest.fixture
def dispatcher(mock_probe):
    """Create dispatcher with mock probe."""
    return EventDispatcher(probe=mock_probe)


@pytest.fixture
def event():
    """Create a GroupDeleted event."""
    return GroupDeleted(
        group=GroupRef(id=GroupId.generate(), entity_type="node", bundle="club")
    )


class TestPublish:
    """Tests for publish."""

    @pytest.mark.asyncio
    async def test_handlers_run_in_subscription_order(self, dispatcher, event):
        """Handlers are awaited in the order they subscribed."""
        calls: list[str] = []

        async def first(e):
            calls.append("first")
            return 1

        async def second(e):
            calls.append("second")
            return 2

        dispatcher.subscribe(GroupDeleted, first)
        dispatcher.subscribe(GroupDeleted, second)

        results = await dispatcher.publish(event)

        assert calls == ["first", "second"]
        assert results == [1, 2]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(
        self, dispatcher, event, mock_probe
    ):
        """A handler error is reported and later handlers still run."""
        failing = AsyncMock(side_effect=RuntimeError("down"))
        healthy = AsyncMock(return_value="ok")
        dispatcher.subscribe(GroupDeleted, failing)
        dispatcher.subscribe(GroupDeleted, healthy)

        results = await dispatcher.publish(event)

        healthy.assert_awaited_once_with(event)
        assert results == ["ok"]
        mock_probe.handler_failed.assert_called_once()
        assert mock_probe.handler_failed.call_args.args[2] == "down"

    @pytest.mark.asyncio
    async def test_storage_failure_is_raised_after_all_handlers(
        self, dispatcher, event, mock_probe
    ):
        """The publisher learns about a storage failure and can report again."""
        failing = AsyncMock(side_effect=StorageError("queue down"))
        healthy = AsyncMock(return_value="ok")
        dispatcher.subscribe(GroupDeleted, failing)
        dispatcher.subscribe(GroupDeleted, healthy)

        with pytest.raises(StorageError, match="queue down"):
            await dispatcher.publish(event)

        healthy.assert_awaited_once_with(event)
        mock_probe.handler_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_only_matching_event_type_is_delivered(self, dispatcher, event):
        """Handlers subscribed to another class are not called."""
        other = AsyncMock()
        dispatcher.subscribe(str, other)

        await dispatcher.publish(event)

        other.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_probe_records_dispatch(self, dispatcher, event, mock_probe):
        """The probe sees the event type and handler count."""
        dispatcher.subscribe(GroupDeleted, AsyncMock())

        await dispatcher.publish(event)

        mock_probe.event_dispatched.assert_called_once_with("GroupDeleted", 1)


class TestSubscribe:
    """Tests for subscribe."""

    def test_handlers_for_returns_copy(self, dispatcher):
        """Mutating the returned list does not change the registry."""
        handler = AsyncMock()
        dispatcher.subscribe(GroupDeleted, handler)

        handlers = dispatcher.handlers_for(GroupDeleted)
        handlers.clear()

        assert dispatcher.handlers_for(GroupDeleted) == [handler]
