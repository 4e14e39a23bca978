"""
Schema converter functions.

Centralized helpers for converting stored documents to Pydantic schemas.
These are the single source of truth for document-to-schema conversions,
shared by the REST endpoints and the live broadcast channel.
"""

from typing import Any

from models.cosmos_documents import ResponseDocument, UserDocument
from schemas.survey import StoredResponse, SubmittedAnswer
from schemas.user import RegisteredUser


def user_document_to_schema(user: UserDocument) -> RegisteredUser:
    return RegisteredUser(id=user.id, name=user.name)


def response_document_to_schema(response: ResponseDocument) -> StoredResponse:
    """
    Convert a ResponseDocument to the admin-facing StoredResponse.

    The document's created_at becomes ``timestamp`` on the wire.
    """
    return StoredResponse(
        id=response.id,
        user_id=response.user_id,
        user_name=response.user_name,
        question_id=response.question_id,
        selected_option=response.selected_option,
        timestamp=response.created_at,
    )


def response_document_to_submitted(response: ResponseDocument) -> SubmittedAnswer:
    return SubmittedAnswer(
        id=response.id,
        question_id=response.question_id,
        selected_option=response.selected_option,
    )


def response_document_to_payload(response: ResponseDocument) -> dict[str, Any]:
    """JSON-ready camelCase payload for the live ``new-response`` event."""
    return response_document_to_schema(response).model_dump(mode="json", by_alias=True)
