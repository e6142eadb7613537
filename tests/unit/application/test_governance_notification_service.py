"""Unit tests for GovernanceNotificationService."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

from uuid6 import uuid7

from src.application.services.governance_notification_service import (
    GovernanceNotificationService,
)
from src.domain.events.governance import ActionProposedEvent

EVENT = ActionProposedEvent(
    team_id="team-1",
    actor="0xA",
    occurred_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    action_id=uuid7(),
    target="0xVault",
    description="Pay",
)


async def test_delivers_to_publisher() -> None:
    publisher = AsyncMock()
    service = GovernanceNotificationService(publisher)

    assert await service.publish(EVENT) is True
    publisher.publish.assert_awaited_once_with(EVENT)


async def test_delivery_failure_is_swallowed() -> None:
    publisher = AsyncMock()
    publisher.publish.side_effect = ConnectionError("channel down")
    service = GovernanceNotificationService(publisher)

    assert await service.publish(EVENT) is False


async def test_without_publisher_events_are_dropped() -> None:
    assert await GovernanceNotificationService().publish(EVENT) is False
