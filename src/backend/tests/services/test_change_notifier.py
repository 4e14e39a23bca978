"""Tests for both change notifier modes."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from models.cosmos_documents import ResponseDocument
from services.broadcast import NEW_RESPONSE, TALLIES_UPDATED, BroadcastChannel, ViewerSession
from services.change_notifier import ChangeFeedNotifier, DirectChangeNotifier
from services.tally_service import TallyAggregator


def _response(question_id: str, option: str) -> ResponseDocument:
    return ResponseDocument(user_id="user-1", user_name="Ada", question_id=question_id, selected_option=option)


@pytest.fixture
def channel() -> BroadcastChannel:
    return BroadcastChannel()


@pytest.fixture
def viewer(channel, fake_websocket_factory):
    """A plain viewer and an admin, both connected; returns their sockets."""
    viewer_ws, admin_ws = fake_websocket_factory(), fake_websocket_factory()
    admin = ViewerSession(admin_ws)
    channel.connect(ViewerSession(viewer_ws))
    channel.connect(admin)
    channel.join_admin(admin)
    return viewer_ws, admin_ws


@pytest.mark.unit
class TestDirectChangeNotifier:
    """Fallback mode: the gateway calls the notifier after each write."""

    async def test_single_insert(self, memory_store, channel, viewer):
        viewer_ws, admin_ws = viewer
        notifier = DirectChangeNotifier(TallyAggregator(memory_store), channel)
        response = await memory_store.insert(_response("1", "Often"))

        await notifier.notify_inserted([response])

        assert viewer_ws.events(TALLIES_UPDATED) == [{"1": {"Often": 1}}]
        assert viewer_ws.events(NEW_RESPONSE) == []
        assert [r["id"] for r in admin_ws.events(NEW_RESPONSE)] == [response.id]
        assert admin_ws.events(TALLIES_UPDATED) == [{"1": {"Often": 1}}]

    async def test_batch_gives_one_snapshot_and_one_event_per_response(self, memory_store, channel, viewer):
        viewer_ws, admin_ws = viewer
        notifier = DirectChangeNotifier(TallyAggregator(memory_store), channel)
        batch = await memory_store.insert_many([_response("1", "Often"), _response("2", "Never"), _response("3", "Always")])

        await notifier.notify_inserted(batch)

        assert len(viewer_ws.events(TALLIES_UPDATED)) == 1
        assert len(admin_ws.events(NEW_RESPONSE)) == 3

    async def test_empty_batch_is_silent(self, memory_store, channel, viewer):
        viewer_ws, admin_ws = viewer
        notifier = DirectChangeNotifier(TallyAggregator(memory_store), channel)

        await notifier.notify_inserted([])

        assert viewer_ws.sent == []
        assert admin_ws.sent == []

    async def test_recompute_failure_is_swallowed(self, channel, viewer):
        viewer_ws, _ = viewer
        aggregator = AsyncMock()
        aggregator.compute_tallies = AsyncMock(side_effect=RuntimeError("store down"))
        notifier = DirectChangeNotifier(aggregator, channel)

        assert await notifier.publish_tallies() is None
        assert viewer_ws.events(TALLIES_UPDATED) == []

    async def test_broadcast_failure_is_swallowed(self, memory_store, channel):
        channel.broadcast_tallies = AsyncMock(side_effect=RuntimeError("socket gone"))
        notifier = DirectChangeNotifier(TallyAggregator(memory_store), channel)
        await memory_store.insert(_response("1", "Often"))

        assert await notifier.publish_tallies() is None

    async def test_dead_viewer_does_not_block_others(self, memory_store, channel, fake_websocket_factory):
        viewer_ws, admin_ws = fake_websocket_factory(), fake_websocket_factory()
        admin = ViewerSession(admin_ws)
        channel.connect(ViewerSession(fake_websocket_factory(fail=True)))
        channel.connect(ViewerSession(viewer_ws))
        channel.connect(admin)
        channel.join_admin(admin)
        notifier = DirectChangeNotifier(TallyAggregator(memory_store), channel)
        stored = await memory_store.insert(_response("1", "Often"))

        await notifier.notify_inserted([stored])

        assert viewer_ws.events(TALLIES_UPDATED) == [{"1": {"Often": 1}}]
        assert admin_ws.events(TALLIES_UPDATED) == [{"1": {"Often": 1}}]
        assert channel.session_count == 2


@pytest.mark.unit
class TestChangeFeedNotifier:
    """Durable mode: raw responses come from the change feed."""

    async def test_notify_inserted_only_publishes_tallies(self, memory_store, channel, viewer, mock_cosmos_session):
        viewer_ws, admin_ws = viewer
        notifier = ChangeFeedNotifier(TallyAggregator(memory_store), channel, mock_cosmos_session)
        response = await memory_store.insert(_response("1", "Often"))

        await notifier.notify_inserted([response])

        assert viewer_ws.events(TALLIES_UPDATED) == [{"1": {"Often": 1}}]
        assert admin_ws.events(NEW_RESPONSE) == []

    async def test_poll_once_forwards_each_feed_item(self, memory_store, channel, viewer, mock_cosmos_session):
        _, admin_ws = viewer
        items = [_response("1", "Often").to_item(), _response("2", "Never").to_item()]
        mock_cosmos_session.read_change_feed = AsyncMock(return_value=(items, "etag-1"))
        notifier = ChangeFeedNotifier(TallyAggregator(memory_store), channel, mock_cosmos_session)

        count = await notifier.poll_once()

        assert count == 2
        assert [r["id"] for r in admin_ws.events(NEW_RESPONSE)] == [item["id"] for item in items]

    async def test_poll_once_skips_malformed_item(self, memory_store, channel, viewer, mock_cosmos_session):
        _, admin_ws = viewer
        good = [_response("1", "Often").to_item(), _response("2", "Never").to_item()]
        items = [good[0], {"id": "broken", "user_id": "user-1"}, good[1]]
        mock_cosmos_session.read_change_feed = AsyncMock(return_value=(items, "etag-2"))
        notifier = ChangeFeedNotifier(TallyAggregator(memory_store), channel, mock_cosmos_session)

        await notifier.poll_once()

        assert [r["id"] for r in admin_ws.events(NEW_RESPONSE)] == [item["id"] for item in good]

    async def test_poll_once_resumes_from_continuation(self, memory_store, channel, mock_cosmos_session):
        mock_cosmos_session.read_change_feed = AsyncMock(side_effect=[([], "etag-1"), ([], "etag-2")])
        notifier = ChangeFeedNotifier(TallyAggregator(memory_store), channel, mock_cosmos_session)

        await notifier.poll_once()
        await notifier.poll_once()

        second_call = mock_cosmos_session.read_change_feed.await_args_list[1]
        assert second_call.kwargs["continuation"] == "etag-1"

    async def test_start_and_stop_background_task(self, memory_store, channel, mock_cosmos_session):
        notifier = ChangeFeedNotifier(
            TallyAggregator(memory_store), channel, mock_cosmos_session, poll_interval=0.01
        )

        await notifier.start()
        await asyncio.sleep(0.05)
        await notifier.stop()

        assert mock_cosmos_session.read_change_feed.await_count >= 1
        assert notifier._task is None

    async def test_poll_errors_do_not_stop_the_loop(self, memory_store, channel, mock_cosmos_session):
        mock_cosmos_session.read_change_feed = AsyncMock(side_effect=RuntimeError("feed unavailable"))
        notifier = ChangeFeedNotifier(
            TallyAggregator(memory_store), channel, mock_cosmos_session, poll_interval=0.01
        )

        await notifier.start()
        await asyncio.sleep(0.05)
        await notifier.stop()

        assert mock_cosmos_session.read_change_feed.await_count >= 2
