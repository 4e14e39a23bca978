"""Document and questionnaire models."""

from models.cosmos_documents import CosmosDocument, ResponseDocument, UserDocument
from models.questionnaire import (
    PlainQuestion,
    Question,
    QuestionDefinition,
    Section,
    SelfContainedQuestion,
    build_question_table,
)

__all__ = [
    "CosmosDocument",
    "UserDocument",
    "ResponseDocument",
    "PlainQuestion",
    "SelfContainedQuestion",
    "Question",
    "QuestionDefinition",
    "Section",
    "build_question_table",
]
