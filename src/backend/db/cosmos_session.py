"""
Azure Cosmos DB session management for document storage.

Uses the async Cosmos DB SDK. Supports key authentication through a
connection string (local emulator) and DefaultAzureCredential for RBAC
deployments. One CosmosSession is created at startup and owned by the
application; nothing here is a module-level singleton.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any

from azure.cosmos import PartitionKey
from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy
from azure.identity.aio import DefaultAzureCredential

logger = logging.getLogger(__name__)

# Container names
USERS_CONTAINER = "users"
RESPONSES_CONTAINER = "survey-responses"

# Partition key path per container
PARTITION_KEYS = {
    USERS_CONTAINER: "/id",
    RESPONSES_CONTAINER: "/user_id",
}

# Cosmos DB caps a transactional batch at 100 operations
MAX_BATCH_OPERATIONS = 100


def parse_connection_string(connection_string: str) -> tuple[str, str]:
    """
    Split a Cosmos DB connection string into endpoint and key.

    Format: AccountEndpoint=https://...;AccountKey=...;

    Raises:
        ValueError: If either part is missing.
    """
    conn_parts = dict(part.split("=", 1) for part in connection_string.split(";") if "=" in part)
    endpoint = conn_parts.get("AccountEndpoint", "")
    key = conn_parts.get("AccountKey", "")

    if not endpoint or not key:
        raise ValueError("AZURE_COSMOS_CONNECTION_STRING must contain AccountEndpoint and AccountKey")
    return endpoint, key


class CosmosSession:
    """
    Owns the Cosmos DB client, database and container proxies.

    Usage:
        session = CosmosSession(database_name="tally", connection_string=...)
        await session.connect(timeout=3)
        container = session.get_container(RESPONSES_CONTAINER)
    """

    def __init__(
        self,
        database_name: str,
        connection_string: str | None = None,
        endpoint: str | None = None,
        disable_ssl: bool = False,
    ):
        if not connection_string and not endpoint:
            raise ValueError("Either AZURE_COSMOS_ENDPOINT or AZURE_COSMOS_CONNECTION_STRING must be set")

        self.database_name = database_name
        self._connection_string = connection_string
        self._endpoint = endpoint
        self._disable_ssl = disable_ssl

        self._client: CosmosClient | None = None
        self._credential: DefaultAzureCredential | None = None
        self._database: DatabaseProxy | None = None
        self._containers: dict[str, ContainerProxy] = {}

    def _create_client(self) -> CosmosClient:
        if self._connection_string:
            endpoint, key = parse_connection_string(self._connection_string)
            # Emulator uses a self-signed certificate
            client = CosmosClient(
                url=endpoint,
                credential=key,
                connection_verify=not self._disable_ssl,
            )
            logger.info(
                f"Initialized Cosmos DB client for {endpoint} (connection string mode, "
                f"SSL verification: {not self._disable_ssl})"
            )
            return client

        self._credential = DefaultAzureCredential()
        client = CosmosClient(url=self._endpoint, credential=self._credential)
        logger.info(f"Initialized Cosmos DB client for {self._endpoint} (RBAC mode)")
        return client

    async def connect(self, timeout: float | None = None) -> None:
        """
        Open the client and make sure the database and containers exist.

        The round trips double as a reachability check: if the account does
        not answer within ``timeout`` seconds, the session is closed and
        the error propagates to the caller.
        """
        self._client = self._create_client()
        try:
            await asyncio.wait_for(self._provision(), timeout=timeout)
        except Exception:
            await self.close()
            raise

    async def _provision(self) -> None:
        assert self._client is not None
        self._database = await self._client.create_database_if_not_exists(id=self.database_name)
        logger.info(f"Connected to database: {self.database_name}")

        for name, path in PARTITION_KEYS.items():
            self._containers[name] = await self._database.create_container_if_not_exists(
                id=name,
                partition_key=PartitionKey(path=path),
            )

    @property
    def is_connected(self) -> bool:
        return self._database is not None

    def get_container(self, container_name: str) -> ContainerProxy:
        """
        Get a container proxy for the specified container.

        Raises:
            RuntimeError: If called before connect().
        """
        if container_name not in self._containers:
            if self._database is None:
                raise RuntimeError("CosmosSession.connect() has not been awaited")
            self._containers[container_name] = self._database.get_container_client(container_name)
        return self._containers[container_name]

    async def close(self) -> None:
        """
        Close Cosmos DB connections.

        Should be called during application shutdown.
        """
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._database = None
            self._containers = {}
            logger.info("Closed Cosmos DB client")

        if self._credential is not None:
            await self._credential.close()
            self._credential = None

    # ========================================================================
    # Utility Functions for Common Operations
    # ========================================================================

    async def create_item(self, container_name: str, item: dict[str, Any]) -> dict[str, Any]:
        """Create a new item in the specified container."""
        container = self.get_container(container_name)
        return await container.create_item(body=item)

    async def create_items_batch(
        self,
        container_name: str,
        items: list[dict[str, Any]],
        partition_key: str,
    ) -> None:
        """
        Create items that share a partition key as transactional batches.

        Each batch of up to MAX_BATCH_OPERATIONS items is all-or-nothing.
        """
        container = self.get_container(container_name)
        for start in range(0, len(items), MAX_BATCH_OPERATIONS):
            chunk = items[start : start + MAX_BATCH_OPERATIONS]
            operations = [("create", (item,)) for item in chunk]
            await container.execute_item_batch(batch_operations=operations, partition_key=partition_key)

    async def query_items(
        self,
        container_name: str,
        query: str,
        parameters: list[dict[str, Any]] | None = None,
        partition_key: str | None = None,
        max_items: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Query items using SQL-like syntax.

        Example:
            results = await session.query_items(
                RESPONSES_CONTAINER,
                'SELECT * FROM c WHERE c.question_id = @question_id',
                parameters=[{'name': '@question_id', 'value': '1'}]
            )
        """
        container = self.get_container(container_name)

        # Cross-partition queries are enabled automatically when no partition_key is given
        query_kwargs: dict[str, Any] = {
            "query": query,
        }

        if parameters:
            query_kwargs["parameters"] = parameters

        if partition_key:
            query_kwargs["partition_key"] = partition_key

        if max_items:
            query_kwargs["max_item_count"] = max_items

        items: list[dict[str, Any]] = []
        async for item in container.query_items(**query_kwargs):
            items.append(item)
            if max_items and len(items) >= max_items:
                break

        return items

    async def read_change_feed(
        self,
        container_name: str,
        continuation: str | None = None,
        start_time: datetime | None = None,
    ) -> tuple[list[dict[str, Any]], str | None]:
        """
        Read one page of the container's change feed.

        Pass ``start_time`` on the first call and the returned continuation
        token afterwards. Returns the changed items and the token to resume
        from (unchanged if the service did not hand out a new one).
        """
        container = self.get_container(container_name)

        feed_kwargs: dict[str, Any] = {}
        if continuation:
            feed_kwargs["continuation"] = continuation
        elif start_time is not None:
            feed_kwargs["start_time"] = start_time

        items: list[dict[str, Any]] = []
        async for item in container.query_items_change_feed(**feed_kwargs):
            items.append(item)

        headers = container.client_connection.last_response_headers or {}
        return items, headers.get("etag") or continuation
