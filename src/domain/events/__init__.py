"""
Domain events for the governance engine.

Emitted after a state change is saved and handed to the notification
publisher. All events are immutable and timestamped.
"""

from src.domain.events.governance import (
    GOVERNANCE_EVENT_SCHEMA_VERSION,
    ActionApprovedEvent,
    ActionExecutedEvent,
    ActionExecutionFailedEvent,
    ActionProposedEvent,
    ActionReconciledEvent,
    ActionWithdrawnEvent,
    ElectionCreatedEvent,
    ElectionPublishedEvent,
    GovernanceEvent,
    VoteCastEvent,
)

__all__: list[str] = [
    "GOVERNANCE_EVENT_SCHEMA_VERSION",
    "GovernanceEvent",
    "ActionProposedEvent",
    "ActionApprovedEvent",
    "ActionExecutedEvent",
    "ActionExecutionFailedEvent",
    "ActionWithdrawnEvent",
    "ActionReconciledEvent",
    "ElectionCreatedEvent",
    "VoteCastEvent",
    "ElectionPublishedEvent",
]
