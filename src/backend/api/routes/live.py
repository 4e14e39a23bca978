"""
Live updates over WebSocket.

Each viewer holds one connection. Frames are JSON
``{"event": ..., "data": ...}``. The server pushes ``tallies-updated`` (on
connect and after every write) and, to admin sessions, ``new-response``.
The only client event is ``join-admin``; anything else is ignored.
"""

import json

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from api.deps import get_channel, get_ws_survey_service
from core.exceptions import SurveyError
from services.broadcast import JOIN_ADMIN, BroadcastChannel, ViewerSession
from services.survey_service import SurveyService

logger = structlog.get_logger(__name__)

router = APIRouter()


def parse_client_event(raw: str) -> str | None:
    """Extract the event name from a client frame (JSON object or bare string)."""
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        return raw.strip() or None

    if isinstance(message, dict):
        event = message.get("event")
        return event if isinstance(event, str) else None
    if isinstance(message, str):
        return message
    return None


@router.websocket("/ws/live")
async def live_updates(
    websocket: WebSocket,
    channel: BroadcastChannel = Depends(get_channel),
    service: SurveyService = Depends(get_ws_survey_service),
) -> None:
    await websocket.accept()
    session = ViewerSession(websocket)
    channel.connect(session)

    try:
        try:
            snapshot = await service.get_tallies()
        except SurveyError as e:
            logger.warning("initial_tallies_unavailable", session_id=session.id, error=str(e))
        else:
            await channel.send_tallies(session, snapshot)

        while True:
            raw = await websocket.receive_text()
            event = parse_client_event(raw)
            if event == JOIN_ADMIN:
                channel.join_admin(session)
            else:
                logger.debug("client_event_ignored", session_id=session.id, client_event=event)
    except WebSocketDisconnect:
        pass
    finally:
        channel.disconnect(session)
