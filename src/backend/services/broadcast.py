"""
Live broadcast channel.

Keeps the registry of connected viewer sessions and the admin group, and
fans out two events:

- ``tallies-updated``: full Tally Snapshot, to every session
- ``new-response``: one raw response, to admin sessions only

Every frame is JSON ``{"event": <name>, "data": <payload>}``. Deliveries are
best effort: a session that fails a send is dropped and simply misses the
event. Snapshots carry full state, so the next broadcast heals any gap.

Joining the admin group is not authenticated.
"""

from typing import Any, Protocol
from uuid import uuid4

import structlog

from models.cosmos_documents import ResponseDocument
from schemas.converters import response_document_to_payload
from schemas.survey import TallySnapshot

logger = structlog.get_logger(__name__)

TALLIES_UPDATED = "tallies-updated"
NEW_RESPONSE = "new-response"
JOIN_ADMIN = "join-admin"


class JSONSender(Protocol):
    async def send_json(self, data: Any, mode: str = "text") -> None: ...


class ViewerSession:
    """One live connection (normally a FastAPI WebSocket)."""

    def __init__(self, websocket: JSONSender, session_id: str | None = None):
        self.id = session_id or uuid4().hex
        self.websocket = websocket

    async def send(self, event: str, data: Any) -> None:
        await self.websocket.send_json({"event": event, "data": data})

    def __repr__(self) -> str:
        return f"ViewerSession(id={self.id!r})"


class BroadcastChannel:
    """Publish/subscribe fan-out to viewer sessions."""

    ADMIN_GROUP = "admin"

    def __init__(self) -> None:
        self._sessions: dict[str, ViewerSession] = {}
        self._admins: set[str] = set()

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    def connect(self, session: ViewerSession) -> None:
        self._sessions[session.id] = session
        logger.info("viewer_connected", session_id=session.id, viewers=len(self._sessions))

    def disconnect(self, session: ViewerSession) -> None:
        if self._sessions.pop(session.id, None) is not None:
            self._admins.discard(session.id)
            logger.info("viewer_disconnected", session_id=session.id, viewers=len(self._sessions))

    def join_admin(self, session: ViewerSession) -> None:
        """Add a connected session to the admin group. Unknown sessions are ignored."""
        if session.id not in self._sessions:
            return
        self._admins.add(session.id)
        logger.info("admin_joined", session_id=session.id, admins=len(self._admins))

    def is_admin(self, session: ViewerSession) -> bool:
        return session.id in self._admins

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    @property
    def admin_count(self) -> int:
        return len(self._admins)

    # =========================================================================
    # Fan-out
    # =========================================================================

    async def broadcast_tallies(self, snapshot: TallySnapshot) -> int:
        """Send the snapshot to every connected session. Returns deliveries."""
        delivered = 0
        for session in list(self._sessions.values()):
            if await self._deliver(session, TALLIES_UPDATED, snapshot):
                delivered += 1
        logger.debug("tallies_broadcast", delivered=delivered)
        return delivered

    async def notify_admins(self, response: ResponseDocument) -> int:
        """Send one raw response to the admin group. Returns deliveries."""
        payload = response_document_to_payload(response)
        delivered = 0
        for session_id in list(self._admins):
            session = self._sessions.get(session_id)
            if session is not None and await self._deliver(session, NEW_RESPONSE, payload):
                delivered += 1
        return delivered

    async def send_tallies(self, session: ViewerSession, snapshot: TallySnapshot) -> bool:
        """Send the snapshot to one session (initial state on connect)."""
        return await self._deliver(session, TALLIES_UPDATED, snapshot)

    async def _deliver(self, session: ViewerSession, event: str, data: Any) -> bool:
        try:
            await session.send(event, data)
        except Exception as e:
            logger.debug("viewer_send_failed", session_id=session.id, frame_event=event, error=str(e))
            self.disconnect(session)
            return False
        return True
