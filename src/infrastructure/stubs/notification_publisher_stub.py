"""In-memory stub for GovernanceNotificationPublisherProtocol.

Records every published event. Can be switched into a failing mode to
check that delivery failures never roll back governance transitions.
"""

from __future__ import annotations

from src.domain.events.governance import GovernanceEvent


class NotificationPublisherStub:
    """Recording stub implementation of GovernanceNotificationPublisherProtocol.

    Attributes:
        published: Events delivered, in publish order.
        fail: When True, publish() raises ConnectionError.
    """

    def __init__(self, fail: bool = False) -> None:
        self.published: list[GovernanceEvent] = []
        self.fail = fail

    async def publish(self, event: GovernanceEvent) -> None:
        if self.fail:
            raise ConnectionError(f"notification channel unavailable for {event.event_type}")
        self.published.append(event)

    def event_types(self) -> list[str]:
        return [event.event_type for event in self.published]

    def clear(self) -> None:
        """Clear recorded events (for test cleanup)."""
        self.published.clear()
