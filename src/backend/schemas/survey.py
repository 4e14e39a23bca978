"""
Survey submission and tally schemas.

Request bodies use camelCase field names on the wire; every model accepts
either the alias or the Python field name.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

# {question_id: {option: count}}
TallySnapshot = dict[str, dict[str, int]]


class SurveySubmit(BaseModel):
    """Schema for submitting a single answer."""

    user_id: str | None = Field(None, alias="userId")
    user_name: str | None = Field(None, alias="userName")
    question_id: str | int | None = Field(None, alias="questionId")
    selected_option: str | int | float | None = Field(None, alias="selectedOption")

    model_config = {"populate_by_name": True}


class SurveySubmitAll(BaseModel):
    """Schema for submitting a whole questionnaire at once."""

    user_id: str | None = Field(None, alias="userId")
    user_name: str | None = Field(None, alias="userName")
    answers: Any = Field(None, description="Mapping of question id to selected option")

    model_config = {"populate_by_name": True}


class SubmittedAnswer(BaseModel):
    """Minimal view of a just-stored answer."""

    id: str
    question_id: str = Field(..., alias="questionId")
    selected_option: str = Field(..., alias="selectedOption")

    model_config = {"populate_by_name": True}


class SubmitResponse(BaseModel):
    """Response after a single answer is stored."""

    success: bool = True
    response: SubmittedAnswer


class SubmitAllResponse(BaseModel):
    """Response after a bulk submission is stored."""

    success: bool = True
    count: int


class StoredResponse(BaseModel):
    """
    Full answer record as shown to admins.

    Used both by GET /api/survey/responses and the live new-response event.
    """

    id: str
    user_id: str = Field(..., alias="userId")
    user_name: str = Field(..., alias="userName")
    question_id: str = Field(..., alias="questionId")
    selected_option: str = Field(..., alias="selectedOption")
    timestamp: datetime

    model_config = {"populate_by_name": True}


class QuestionInfo(BaseModel):
    """Resolved questionnaire entry."""

    text: str
    section: str
    options: list[str]


class ResetResponse(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    database: str


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""

    error: str
