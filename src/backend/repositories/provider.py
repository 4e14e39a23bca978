"""
Repository provider.

Defines the survey store interface and picks an implementation once at
startup: Cosmos DB when it is configured and answers within the connect
timeout, the in-memory store otherwise.

Usage:
    store, session = await create_survey_store(settings)
    app.state.store = store
"""

from typing import Protocol, runtime_checkable

import structlog

from core.config import Settings
from db.cosmos_session import CosmosSession
from models.cosmos_documents import ResponseDocument, UserDocument
from repositories.cosmos_survey_repository import CosmosSurveyRepository
from repositories.memory_survey_repository import InMemorySurveyRepository

logger = structlog.get_logger(__name__)


# =============================================================================
# Repository Protocol (Interface)
# =============================================================================


@runtime_checkable
class SurveyStoreProtocol(Protocol):
    """Protocol defining survey store operations."""

    mode: str

    @property
    def is_durable(self) -> bool: ...

    async def create_user(self, name: str) -> UserDocument: ...
    async def insert(self, response: ResponseDocument) -> ResponseDocument: ...
    async def insert_many(self, responses: list[ResponseDocument]) -> list[ResponseDocument]: ...
    async def list_recent(self, limit: int = 100) -> list[ResponseDocument]: ...
    async def list_selections(self) -> list[tuple[str, str]]: ...
    async def clear(self) -> None: ...


# =============================================================================
# Store Factory
# =============================================================================


async def create_survey_store(
    settings: Settings,
) -> tuple[SurveyStoreProtocol, CosmosSession | None]:
    """
    Build the survey store for this process.

    Returns the store and, in durable mode, the open Cosmos session (the
    caller closes it on shutdown).
    """
    if not settings.cosmos_configured:
        logger.info("survey_store_selected", mode="memory", reason="cosmos_not_configured")
        return InMemorySurveyRepository(), None

    session = CosmosSession(
        database_name=settings.AZURE_COSMOS_DATABASE,
        connection_string=settings.AZURE_COSMOS_CONNECTION_STRING,
        endpoint=settings.AZURE_COSMOS_ENDPOINT,
        disable_ssl=settings.AZURE_COSMOS_DISABLE_SSL,
    )
    try:
        await session.connect(timeout=settings.COSMOS_CONNECT_TIMEOUT_SECONDS)
    except Exception as e:
        logger.warning(
            "cosmos_unavailable",
            error=str(e),
            error_type=type(e).__name__,
        )
        logger.info("survey_store_selected", mode="memory", reason="cosmos_unreachable")
        return InMemorySurveyRepository(), None

    logger.info("survey_store_selected", mode="cosmos", database=settings.AZURE_COSMOS_DATABASE)
    return CosmosSurveyRepository(session), session
