"""
In-memory survey store.

Used when no Cosmos DB account is configured or reachable at startup.
Everything lives in process memory and is lost on restart. All mutation
happens on the event loop thread without suspension points, so no lock is
needed and insert_many is atomic for any reader.
"""

import structlog

from models.cosmos_documents import ResponseDocument, UserDocument

logger = structlog.get_logger(__name__)


class InMemorySurveyRepository:
    """Survey store backed by plain lists."""

    mode = "memory"

    def __init__(self) -> None:
        self._users: list[UserDocument] = []
        self._responses: list[ResponseDocument] = []

    @property
    def is_durable(self) -> bool:
        return False

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create_user(self, name: str) -> UserDocument:
        user = UserDocument(name=name)
        self._users.append(user)
        return user

    async def insert(self, response: ResponseDocument) -> ResponseDocument:
        """Store one response. Id and timestamp are assigned on the document."""
        self._responses.append(response)
        return response

    async def insert_many(self, responses: list[ResponseDocument]) -> list[ResponseDocument]:
        """Store a batch in one step: readers see all of it or none of it."""
        batch = list(responses)
        self._responses.extend(batch)
        return batch

    async def clear(self) -> None:
        """Remove every user and response."""
        user_count, response_count = len(self._users), len(self._responses)
        self._users = []
        self._responses = []
        logger.info("memory_store_cleared", users=user_count, responses=response_count)

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def list_recent(self, limit: int = 100) -> list[ResponseDocument]:
        """
        Newest responses first.

        Responses sharing a timestamp (one batch) come back newest-inserted
        first as well.
        """
        newest_first = sorted(reversed(self._responses), key=lambda r: r.created_at, reverse=True)
        return newest_first[:limit]

    async def list_selections(self) -> list[tuple[str, str]]:
        return [(r.question_id, r.selected_option) for r in self._responses]
