"""Fire-and-forget delivery of governance events.

Services call publish() after a state change has been saved. Delivery
failures are logged and never raised, so a broken notification channel
can never roll back an approval, an execution or a publication.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from structlog import get_logger

if TYPE_CHECKING:
    from src.application.ports.notification_publisher import (
        GovernanceNotificationPublisherProtocol,
    )
    from src.domain.events.governance import GovernanceEvent

logger = get_logger(__name__)


class GovernanceNotificationService:
    """Wraps an optional publisher with failure isolation.

    Example:
        >>> notifier = GovernanceNotificationService(publisher)
        >>> await notifier.publish(event)  # never raises on delivery failure
    """

    def __init__(
        self,
        publisher: GovernanceNotificationPublisherProtocol | None = None,
    ) -> None:
        """Initialize the notification service.

        Args:
            publisher: Delivery channel. If not provided, events are only
                logged.
        """
        self._publisher = publisher

    async def publish(self, event: GovernanceEvent) -> bool:
        """Deliver an event.

        Args:
            event: The event to deliver.

        Returns:
            True if the publisher accepted the event, False if there is no
            publisher or delivery failed.
        """
        log = logger.bind(event_type=event.event_type, team_id=event.team_id)
        if self._publisher is None:
            log.debug("No notification publisher configured")
            return False
        try:
            await self._publisher.publish(event)
        except Exception as exc:
            log.warning(
                "Governance notification delivery failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return False
        log.debug("Governance notification delivered")
        return True
