"""
Document models for the survey store.

These Pydantic models define the document structure stored in Cosmos DB and
held by the in-memory store. Both stores hand these objects to the rest of
the application, so services never see raw container items.

Container Strategy:
- users: Registered participants (partition: /id)
- survey-responses: One document per answered question (partition: /user_id)
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, field_serializer


TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utcnow() -> datetime:
    """Timezone-aware current time used for every document timestamp."""
    return datetime.now(timezone.utc)


# ============================================================================
# Base Document Model
# ============================================================================


class CosmosDocument(BaseModel):
    """
    Base class for stored documents.

    All documents have:
    - id: Unique identifier, assigned by the store
    - created_at: Creation timestamp, assigned by the store

    Cosmos DB system properties (_ts, _etag, _rid, ...) are kept as extra
    fields when documents are read back from a container.
    """

    model_config = {"extra": "allow"}

    id: str = Field(default_factory=lambda: str(uuid4()))
    created_at: datetime = Field(default_factory=utcnow)

    @field_serializer("created_at", when_used="json")
    def serialize_created_at(self, value: datetime) -> str:
        # Fixed width so container ORDER BY on the string matches time order
        return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)

    def to_item(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible container item (system fields dropped)."""
        item = self.model_dump(mode="json")
        return {key: value for key, value in item.items() if not key.startswith("_")}


# ============================================================================
# Survey Documents
# ============================================================================


class UserDocument(CosmosDocument):
    """
    Registered participant.

    Partition key: /id
    Immutable after creation.
    """

    name: str


class ResponseDocument(CosmosDocument):
    """
    One answer to one question.

    Partition key: /user_id, so every answer from a single submit-all lands
    in one logical partition and can be written as one transactional batch.

    user_id is a reference only; removing a user never removes responses.
    user_name is denormalized for the admin feed.
    """

    user_id: str
    user_name: str
    question_id: str
    selected_option: str
