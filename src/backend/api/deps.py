"""
Shared dependencies for API endpoints.

Everything is created once at startup (see core.events) and lives on
``app.state``; these helpers hand it to route handlers.
"""

from fastapi import Request, WebSocket

from services.broadcast import BroadcastChannel
from services.survey_service import SurveyService


def get_survey_service(request: Request) -> SurveyService:
    return request.app.state.survey_service


def get_channel(websocket: WebSocket) -> BroadcastChannel:
    return websocket.app.state.channel


def get_ws_survey_service(websocket: WebSocket) -> SurveyService:
    return websocket.app.state.survey_service
