"""
Cosmos DB survey repository.

Stores users and survey responses as documents. Responses are partitioned
by user_id so that a whole questionnaire from one participant is written as
a single transactional batch.
"""

from collections import defaultdict

import structlog

from core.exceptions import UnsupportedOperationError
from db.cosmos_session import RESPONSES_CONTAINER, USERS_CONTAINER, CosmosSession
from models.cosmos_documents import ResponseDocument, UserDocument

logger = structlog.get_logger(__name__)


class CosmosSurveyRepository:
    """
    Durable survey store.

    Bulk deletion is intentionally not offered: reset is only available on
    the in-memory store.
    """

    mode = "cosmos"

    def __init__(self, session: CosmosSession):
        self.session = session

    @property
    def is_durable(self) -> bool:
        return True

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create_user(self, name: str) -> UserDocument:
        user = UserDocument(name=name)
        await self.session.create_item(USERS_CONTAINER, user.to_item())
        logger.debug("user_created", user_id=user.id)
        return user

    async def insert(self, response: ResponseDocument) -> ResponseDocument:
        await self.session.create_item(RESPONSES_CONTAINER, response.to_item())
        logger.debug("response_created", response_id=response.id, question_id=response.question_id)
        return response

    async def insert_many(self, responses: list[ResponseDocument]) -> list[ResponseDocument]:
        """
        Create responses as transactional batches, one per user partition.

        A batch either lands completely or raises without writing anything.
        """
        by_user: dict[str, list[ResponseDocument]] = defaultdict(list)
        for response in responses:
            by_user[response.user_id].append(response)

        for user_id, batch in by_user.items():
            await self.session.create_items_batch(
                RESPONSES_CONTAINER,
                [response.to_item() for response in batch],
                partition_key=user_id,
            )
            logger.debug("responses_batch_created", user_id=user_id, count=len(batch))

        return list(responses)

    async def clear(self) -> None:
        raise UnsupportedOperationError("Reset is not supported in durable mode")

    # ========================================================================
    # Query Operations
    # ========================================================================

    async def list_recent(self, limit: int = 100) -> list[ResponseDocument]:
        """Newest responses first, across all partitions."""
        query = """
            SELECT TOP @limit * FROM c
            ORDER BY c.created_at DESC
        """
        results = await self.session.query_items(
            RESPONSES_CONTAINER,
            query,
            parameters=[{"name": "@limit", "value": limit}],
        )
        return [ResponseDocument(**item) for item in results]

    async def list_selections(self) -> list[tuple[str, str]]:
        """Every (question_id, selected_option) pair; input for the tally aggregator."""
        query = "SELECT c.question_id, c.selected_option FROM c"
        results = await self.session.query_items(RESPONSES_CONTAINER, query)
        return [(row["question_id"], row["selected_option"]) for row in results]
