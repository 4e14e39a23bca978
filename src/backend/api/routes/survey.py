"""
Survey submission and results endpoints.
"""

from fastapi import APIRouter, Depends, status

from api.deps import get_survey_service
from core.config import settings
from models.questionnaire import QUESTIONS
from schemas.converters import response_document_to_schema, response_document_to_submitted
from schemas.survey import (
    ErrorResponse,
    QuestionInfo,
    StoredResponse,
    SubmitAllResponse,
    SubmitResponse,
    SurveySubmit,
    SurveySubmitAll,
    TallySnapshot,
)
from services.survey_service import SurveyService

router = APIRouter()

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


@router.post(
    "/submit",
    response_model=SubmitResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def submit_response(
    payload: SurveySubmit,
    service: SurveyService = Depends(get_survey_service),
) -> SubmitResponse:
    """Record one answer. Viewers receive the updated tallies."""
    response = await service.submit_one(
        user_id=payload.user_id,
        user_name=payload.user_name,
        question_id=payload.question_id,
        selected_option=payload.selected_option,
    )
    return SubmitResponse(success=True, response=response_document_to_submitted(response))


@router.post(
    "/submit-all",
    response_model=SubmitAllResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def submit_all_responses(
    payload: SurveySubmitAll,
    service: SurveyService = Depends(get_survey_service),
) -> SubmitAllResponse:
    """
    Record a whole questionnaire in one bulk write.

    ``answers`` maps question id to selected option. Viewers receive one
    tally update for the whole batch.
    """
    count = await service.submit_all(
        user_id=payload.user_id,
        user_name=payload.user_name,
        answers=payload.answers,
    )
    return SubmitAllResponse(success=True, count=count)


@router.get("/tallies", response_model=TallySnapshot, responses={500: {"model": ErrorResponse}})
async def get_tallies(service: SurveyService = Depends(get_survey_service)) -> TallySnapshot:
    """Current counts per question and option."""
    return await service.get_tallies()


@router.get("/responses", response_model=list[StoredResponse], responses={500: {"model": ErrorResponse}})
async def list_responses(service: SurveyService = Depends(get_survey_service)) -> list[StoredResponse]:
    """Most recent responses, newest first."""
    responses = await service.list_recent(settings.RECENT_RESPONSES_LIMIT)
    return [response_document_to_schema(r) for r in responses]


@router.get("/questions", response_model=dict[str, QuestionInfo])
async def list_questions() -> dict[str, QuestionInfo]:
    """The questionnaire, keyed by question id."""
    return {question_id: QuestionInfo(**q.to_dict()) for question_id, q in QUESTIONS.items()}
