"""Schemas module initialization."""

from schemas.survey import (
    ErrorResponse,
    HealthResponse,
    QuestionInfo,
    ResetResponse,
    StoredResponse,
    SubmitAllResponse,
    SubmitResponse,
    SubmittedAnswer,
    SurveySubmit,
    SurveySubmitAll,
    TallySnapshot,
)
from schemas.user import RegisteredUser, RegisterResponse, UserRegister

__all__ = [
    "UserRegister",
    "RegisteredUser",
    "RegisterResponse",
    "SurveySubmit",
    "SurveySubmitAll",
    "SubmittedAnswer",
    "SubmitResponse",
    "SubmitAllResponse",
    "StoredResponse",
    "QuestionInfo",
    "ResetResponse",
    "HealthResponse",
    "ErrorResponse",
    "TallySnapshot",
]
