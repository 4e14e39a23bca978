"""
Tests for application startup/shutdown handlers.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from core.events import create_stop_app_handler


@pytest.mark.unit
class TestStopHandler:
    async def test_notifier_failure_still_closes_session(self) -> None:
        notifier = AsyncMock()
        notifier.stop = AsyncMock(side_effect=RuntimeError("task wedged"))
        cosmos_session = AsyncMock()
        app = SimpleNamespace(state=SimpleNamespace(notifier=notifier, cosmos_session=cosmos_session))

        await create_stop_app_handler(app)()

        notifier.stop.assert_awaited_once()
        cosmos_session.close.assert_awaited_once()

    async def test_memory_mode_has_nothing_to_close(self) -> None:
        notifier = AsyncMock()
        app = SimpleNamespace(state=SimpleNamespace(notifier=notifier, cosmos_session=None))

        await create_stop_app_handler(app)()

        notifier.stop.assert_awaited_once()
