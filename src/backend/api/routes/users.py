"""
Participant registration endpoint.
"""

from fastapi import APIRouter, Depends, status

from api.deps import get_survey_service
from schemas.converters import user_document_to_schema
from schemas.survey import ErrorResponse
from schemas.user import RegisterResponse, UserRegister
from services.survey_service import SurveyService

router = APIRouter()


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def register_user(
    payload: UserRegister,
    service: SurveyService = Depends(get_survey_service),
) -> RegisterResponse:
    """
    Register a participant by display name.

    The name is trimmed and must be 1-100 characters long.
    """
    user = await service.register(payload.name)
    return RegisterResponse(success=True, user=user_document_to_schema(user))
