"""
Maintenance endpoints.

Reset wipes every user and response. It is only available while running
on the in-memory store.
"""

from fastapi import APIRouter, Depends

from api.deps import get_survey_service
from schemas.survey import ErrorResponse, ResetResponse
from services.survey_service import SurveyService

router = APIRouter()


@router.post("/reset", response_model=ResetResponse, responses={400: {"model": ErrorResponse}})
async def reset_data(service: SurveyService = Depends(get_survey_service)) -> ResetResponse:
    await service.reset()
    return ResetResponse(success=True, message="All survey data cleared")
