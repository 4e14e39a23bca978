"""
Change notification.

Turns stored responses into live events. One interface, two
implementations, chosen once at startup:

- DirectChangeNotifier (in-memory store): the gateway hands over every
  written response; each one goes to the admin group, then one snapshot is
  broadcast.
- ChangeFeedNotifier (Cosmos DB): a background task polls the responses
  container's change feed and forwards each new document to the admin
  group. Snapshots are still published from the gateway's call path, never
  from the feed, so a batch triggers one recomputation.

Either way an inserted response yields exactly one ``new-response`` event
and each write (or batch) yields one best-effort ``tallies-updated``.
"""

import asyncio
import contextlib
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime, timezone

import structlog
from pydantic import ValidationError

from db.cosmos_session import RESPONSES_CONTAINER, CosmosSession
from models.cosmos_documents import ResponseDocument
from schemas.survey import TallySnapshot
from services.broadcast import BroadcastChannel
from services.tally_service import TallyAggregator

logger = structlog.get_logger(__name__)


class ChangeNotifier(ABC):
    """Common behaviour of both notifier modes."""

    mode: str = ""

    def __init__(self, aggregator: TallyAggregator, channel: BroadcastChannel):
        self.aggregator = aggregator
        self.channel = channel

    async def start(self) -> None:
        """Start background work, if the mode has any."""

    async def stop(self) -> None:
        """Stop background work, if the mode has any."""

    @abstractmethod
    async def notify_inserted(self, responses: Sequence[ResponseDocument]) -> None:
        """Called by the gateway after responses were durably written."""

    async def publish_tallies(self) -> TallySnapshot | None:
        """
        Recompute the snapshot and broadcast it to every viewer.

        Failures are logged and swallowed: the write that triggered this has
        already succeeded and the next broadcast carries full state.
        """
        try:
            snapshot = await self.aggregator.compute_tallies()
        except Exception as e:
            logger.warning("tally_recompute_failed", error=str(e), error_type=type(e).__name__)
            return None

        try:
            delivered = await self.channel.broadcast_tallies(snapshot)
        except Exception as e:
            logger.warning("tally_broadcast_failed", error=str(e), error_type=type(e).__name__)
            return None
        logger.info("tallies_published", questions=len(snapshot), viewers=delivered)
        return snapshot


class DirectChangeNotifier(ChangeNotifier):
    """Fallback mode: notified synchronously by the gateway after each write."""

    mode = "direct"

    async def notify_inserted(self, responses: Sequence[ResponseDocument]) -> None:
        if not responses:
            return
        for response in responses:
            await self.channel.notify_admins(response)
        await self.publish_tallies()


class ChangeFeedNotifier(ChangeNotifier):
    """Durable mode: raw responses come from the Cosmos DB change feed."""

    mode = "change_feed"

    def __init__(
        self,
        aggregator: TallyAggregator,
        channel: BroadcastChannel,
        session: CosmosSession,
        poll_interval: float = 1.0,
    ):
        super().__init__(aggregator, channel)
        self.session = session
        self.poll_interval = poll_interval
        self._continuation: str | None = None
        self._start_time: datetime | None = None
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._task is not None:
            return
        # Only documents written from now on are announced
        self._start_time = datetime.now(timezone.utc)
        self._continuation = None
        self._task = asyncio.create_task(self._run(), name="change-feed-poller")
        logger.info("change_feed_started", container=RESPONSES_CONTAINER, interval=self.poll_interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("change_feed_stopped")

    async def notify_inserted(self, responses: Sequence[ResponseDocument]) -> None:
        if not responses:
            return
        await self.publish_tallies()

    async def poll_once(self) -> int:
        """Read one page of the change feed and announce each new response."""
        items, self._continuation = await self.session.read_change_feed(
            RESPONSES_CONTAINER,
            continuation=self._continuation,
            start_time=self._start_time,
        )
        for item in items:
            try:
                response = ResponseDocument(**item)
            except ValidationError as e:
                logger.warning("change_feed_item_skipped", item_id=item.get("id"), error=str(e))
                continue
            await self.channel.notify_admins(response)
        if items:
            logger.debug("change_feed_batch", count=len(items))
        return len(items)

    async def _run(self) -> None:
        while True:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning("change_feed_poll_failed", error=str(e), error_type=type(e).__name__)
            await asyncio.sleep(self.poll_interval)
