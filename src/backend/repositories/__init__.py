"""Repository modules for survey storage."""

from repositories.cosmos_survey_repository import CosmosSurveyRepository
from repositories.memory_survey_repository import InMemorySurveyRepository
from repositories.provider import SurveyStoreProtocol, create_survey_store

__all__ = [
    "CosmosSurveyRepository",
    "InMemorySurveyRepository",
    "SurveyStoreProtocol",
    "create_survey_store",
]
