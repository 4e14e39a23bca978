"""
Application lifecycle event handlers.

Startup picks the store mode once (Cosmos DB or in-memory), wires the
aggregator, broadcast channel, change notifier and gateway together, and
stores them on ``app.state``. Shutdown stops the change feed and closes the
Cosmos client.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from repositories.provider import create_survey_store
from services.broadcast import BroadcastChannel
from services.change_notifier import ChangeFeedNotifier, ChangeNotifier, DirectChangeNotifier
from services.survey_service import SurveyService
from services.tally_service import TallyAggregator

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info("Starting Tally API...")

        store, cosmos_session = await create_survey_store(settings)
        aggregator = TallyAggregator(store)
        channel = BroadcastChannel()

        notifier: ChangeNotifier
        if cosmos_session is not None:
            notifier = ChangeFeedNotifier(
                aggregator,
                channel,
                cosmos_session,
                poll_interval=settings.CHANGE_FEED_POLL_INTERVAL_SECONDS,
            )
        else:
            notifier = DirectChangeNotifier(aggregator, channel)
        await notifier.start()

        app.state.store = store
        app.state.cosmos_session = cosmos_session
        app.state.channel = channel
        app.state.notifier = notifier
        app.state.survey_service = SurveyService(store, notifier, aggregator)

        logger.info("Tally API started successfully", database=store.mode, notifier=notifier.mode)

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("Shutting down Tally API...")

        notifier = getattr(app.state, "notifier", None)
        if notifier is not None:
            try:
                await notifier.stop()
            except Exception as e:
                logger.warning("change_notifier_cleanup_failed", error=str(e))

        cosmos_session = getattr(app.state, "cosmos_session", None)
        if cosmos_session is not None:
            await cosmos_session.close()
            logger.info("Cosmos DB session closed")

        logger.info("Tally API shutdown complete")

    return stop_app
