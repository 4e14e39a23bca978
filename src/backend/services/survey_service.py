"""
Registration and submission gateway.

Validates incoming register/submit requests, writes accepted records
through the survey store and hands the written responses to the change
notifier. The gateway does not know which store or notifier mode is active.

Ordering within one submission is plain await sequencing: the (bulk)
insert completes before the notifier recomputes, and the recomputation
completes before its snapshot is broadcast.
"""

from collections.abc import Mapping
from typing import Any

import structlog

from core.exceptions import StoreError, SurveyError, SurveyValidationError
from models.cosmos_documents import ResponseDocument, UserDocument
from repositories.provider import SurveyStoreProtocol
from schemas.survey import TallySnapshot
from services.change_notifier import ChangeNotifier
from services.tally_service import TallyAggregator

logger = structlog.get_logger(__name__)

MAX_NAME_LENGTH = 100
DEFAULT_RECENT_LIMIT = 100

ALL_FIELDS_REQUIRED = "All fields are required"


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _as_field(value: Any) -> str:
    """Normalize an accepted identifier (numeric question ids become strings)."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise SurveyValidationError(ALL_FIELDS_REQUIRED)
    return str(value)


class SurveyService:
    """Entry point for every write and read the API performs."""

    def __init__(
        self,
        store: SurveyStoreProtocol,
        notifier: ChangeNotifier,
        aggregator: TallyAggregator | None = None,
    ):
        self.store = store
        self.notifier = notifier
        self.aggregator = aggregator or TallyAggregator(store)

    # =========================================================================
    # Registration
    # =========================================================================

    async def register(self, name: Any) -> UserDocument:
        """
        Register a participant.

        Raises:
            SurveyValidationError: Name missing, blank, or over 100 characters.
            StoreError: The store rejected the write.
        """
        if not isinstance(name, str) or not name.strip():
            raise SurveyValidationError("Name is required")

        name = name.strip()
        if len(name) > MAX_NAME_LENGTH:
            raise SurveyValidationError(f"Name must be at most {MAX_NAME_LENGTH} characters")

        try:
            user = await self.store.create_user(name)
        except SurveyError:
            raise
        except Exception as e:
            logger.exception("user_register_failed", error=str(e))
            raise StoreError("Failed to register user") from e

        logger.info("user_registered", user_id=user.id)
        return user

    # =========================================================================
    # Submission
    # =========================================================================

    async def submit_one(
        self,
        user_id: Any,
        user_name: Any,
        question_id: Any,
        selected_option: Any,
    ) -> ResponseDocument:
        """
        Store one answer and notify viewers.

        Raises:
            SurveyValidationError: Any field missing.
            StoreError: The store rejected the write.
        """
        if any(_is_missing(v) for v in (user_id, user_name, question_id, selected_option)):
            raise SurveyValidationError(ALL_FIELDS_REQUIRED)

        response = ResponseDocument(
            user_id=_as_field(user_id),
            user_name=_as_field(user_name),
            question_id=_as_field(question_id),
            selected_option=_as_field(selected_option),
        )

        try:
            stored = await self.store.insert(response)
        except SurveyError:
            raise
        except Exception as e:
            logger.exception("response_submit_failed", error=str(e))
            raise StoreError("Failed to submit survey response") from e

        logger.info("response_submitted", question_id=stored.question_id, user_id=stored.user_id)
        await self.notifier.notify_inserted([stored])
        return stored

    async def submit_all(self, user_id: Any, user_name: Any, answers: Any) -> int:
        """
        Store a whole questionnaire in one bulk write, then notify once.

        An empty mapping is accepted, writes nothing and broadcasts nothing.

        Raises:
            SurveyValidationError: User fields missing, answers missing or
                not a mapping, or an answer without a selected option.
            StoreError: The store rejected the write.
        """
        if _is_missing(user_id) or _is_missing(user_name) or not isinstance(answers, Mapping):
            raise SurveyValidationError(ALL_FIELDS_REQUIRED)

        responses = []
        for question_id, selected_option in answers.items():
            if _is_missing(question_id) or _is_missing(selected_option):
                raise SurveyValidationError(ALL_FIELDS_REQUIRED)
            responses.append(
                ResponseDocument(
                    user_id=_as_field(user_id),
                    user_name=_as_field(user_name),
                    question_id=_as_field(question_id),
                    selected_option=_as_field(selected_option),
                )
            )

        if not responses:
            return 0

        try:
            stored = await self.store.insert_many(responses)
        except SurveyError:
            raise
        except Exception as e:
            logger.exception("responses_submit_all_failed", error=str(e), count=len(responses))
            raise StoreError("Failed to submit all survey responses") from e

        logger.info("responses_submitted", count=len(stored), user_id=str(user_id))
        await self.notifier.notify_inserted(stored)
        return len(stored)

    # =========================================================================
    # Reads and maintenance
    # =========================================================================

    async def get_tallies(self) -> TallySnapshot:
        try:
            return await self.aggregator.compute_tallies()
        except Exception as e:
            logger.exception("tallies_fetch_failed", error=str(e))
            raise StoreError("Failed to fetch tallies") from e

    async def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[ResponseDocument]:
        try:
            return await self.store.list_recent(limit)
        except Exception as e:
            logger.exception("responses_fetch_failed", error=str(e))
            raise StoreError("Failed to fetch responses") from e

    async def reset(self) -> None:
        """
        Remove all users and responses, then broadcast the empty snapshot.

        Raises:
            UnsupportedOperationError: The store is durable.
        """
        await self.store.clear()
        logger.warning("survey_data_reset", mode=self.store.mode)
        await self.notifier.publish_tallies()
