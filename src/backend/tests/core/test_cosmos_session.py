"""
Tests for the Cosmos DB session wrapper.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from db.cosmos_session import (
    MAX_BATCH_OPERATIONS,
    RESPONSES_CONTAINER,
    CosmosSession,
    parse_connection_string,
)


class _AsyncItems:
    """Minimal async iterable standing in for the SDK's AsyncItemPaged."""

    def __init__(self, items):
        self._items = list(items)

    def __aiter__(self):
        return self._gen()

    async def _gen(self):
        for item in self._items:
            yield item


@pytest.fixture
def session_with_container():
    """A CosmosSession whose responses container is a mock."""
    session = CosmosSession(database_name="tally-test", connection_string="AccountEndpoint=https://x/;AccountKey=k;")
    container = MagicMock()
    container.execute_item_batch = AsyncMock(return_value=[])
    container.create_item = AsyncMock(side_effect=lambda body: body)
    container.client_connection.last_response_headers = {"etag": '"42"'}
    session._containers[RESPONSES_CONTAINER] = container
    return session, container


@pytest.mark.unit
class TestConnectionString:
    def test_parse_connection_string(self) -> None:
        endpoint, key = parse_connection_string("AccountEndpoint=https://localhost:8081/;AccountKey=abc==;")

        assert endpoint == "https://localhost:8081/"
        assert key == "abc=="

    @pytest.mark.parametrize("value", ["", "AccountEndpoint=https://x/;", "AccountKey=abc;"])
    def test_parse_connection_string_incomplete(self, value) -> None:
        with pytest.raises(ValueError):
            parse_connection_string(value)

    def test_session_requires_credentials(self) -> None:
        with pytest.raises(ValueError):
            CosmosSession(database_name="tally")


@pytest.mark.unit
class TestCosmosSessionOperations:
    def test_get_container_before_connect(self) -> None:
        session = CosmosSession(database_name="tally", endpoint="https://example.documents.azure.com")

        assert session.is_connected is False
        with pytest.raises(RuntimeError):
            session.get_container("users")

    async def test_create_item(self, session_with_container) -> None:
        session, container = session_with_container

        result = await session.create_item(RESPONSES_CONTAINER, {"id": "r1"})

        assert result == {"id": "r1"}
        container.create_item.assert_awaited_once_with(body={"id": "r1"})

    async def test_batch_split_at_service_limit(self, session_with_container) -> None:
        session, container = session_with_container
        items = [{"id": str(i), "user_id": "user-1"} for i in range(MAX_BATCH_OPERATIONS + 5)]

        await session.create_items_batch(RESPONSES_CONTAINER, items, partition_key="user-1")

        calls = container.execute_item_batch.await_args_list
        assert [len(call.kwargs["batch_operations"]) for call in calls] == [MAX_BATCH_OPERATIONS, 5]
        assert all(call.kwargs["partition_key"] == "user-1" for call in calls)
        assert calls[0].kwargs["batch_operations"][0] == ("create", (items[0],))

    async def test_query_items_honours_max_items(self, session_with_container) -> None:
        session, container = session_with_container
        container.query_items = MagicMock(return_value=_AsyncItems([{"id": "a"}, {"id": "b"}, {"id": "c"}]))

        results = await session.query_items(RESPONSES_CONTAINER, "SELECT * FROM c", max_items=2)

        assert results == [{"id": "a"}, {"id": "b"}]
        assert container.query_items.call_args.kwargs["max_item_count"] == 2

    async def test_read_change_feed_first_page_uses_start_time(self, session_with_container) -> None:
        session, container = session_with_container
        container.query_items_change_feed = MagicMock(return_value=_AsyncItems([{"id": "r1"}]))
        start = datetime(2025, 1, 1, tzinfo=timezone.utc)

        items, continuation = await session.read_change_feed(RESPONSES_CONTAINER, start_time=start)

        assert items == [{"id": "r1"}]
        assert continuation == '"42"'
        assert container.query_items_change_feed.call_args.kwargs == {"start_time": start}

    async def test_read_change_feed_resumes_with_continuation(self, session_with_container) -> None:
        session, container = session_with_container
        container.query_items_change_feed = MagicMock(return_value=_AsyncItems([]))
        container.client_connection.last_response_headers = {}

        items, continuation = await session.read_change_feed(
            RESPONSES_CONTAINER,
            continuation='"41"',
            start_time=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )

        assert items == []
        assert continuation == '"41"'
        assert container.query_items_change_feed.call_args.kwargs == {"continuation": '"41"'}
