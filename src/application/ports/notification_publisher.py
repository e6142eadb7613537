"""Notification publisher port for governance events.

Port interface for surfacing state transitions (approval recorded,
action executed, election published) to an external notification
collaborator. Delivery is fire-and-forget.
"""

from typing import Protocol

from src.domain.events.governance import GovernanceEvent


class GovernanceNotificationPublisherProtocol(Protocol):
    """Port for publishing governance event notifications."""

    async def publish(self, event: GovernanceEvent) -> None:
        """Publish a notification for an event.

        Args:
            event: The event to deliver.

        Note:
            Implementations may raise on delivery failure; callers log the
            failure and never roll back the transition that produced the
            event.
        """
        ...
