"""Governance event payloads.

Events are emitted after a state change has been saved and are handed
to the notification publisher. They are immutable and self-describing:
each carries its event type and serializes to a JSON-safe dict.

Event types:
- governance.action.proposed
- governance.action.approved
- governance.action.executed
- governance.action.execution_failed
- governance.action.withdrawn
- governance.action.reconciled
- governance.election.created
- governance.election.vote_cast
- governance.election.published
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar
from uuid import UUID

# Schema version for governance event payloads
GOVERNANCE_EVENT_SCHEMA_VERSION: str = "1.0.0"


@dataclass(frozen=True, eq=True)
class GovernanceEvent:
    """Base payload shared by all governance events.

    Attributes:
        team_id: Team the event belongs to.
        actor: Member whose call produced the event.
        occurred_at: When the change was recorded (UTC).
    """

    event_type: ClassVar[str] = "governance.event"

    team_id: str
    actor: str
    occurred_at: datetime

    def _payload(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary for notification delivery.

        WARNING: Never use asdict() - it breaks UUID/datetime serialization.
        """
        return {
            "event_type": self.event_type,
            "team_id": self.team_id,
            "actor": self.actor,
            "occurred_at": self.occurred_at.isoformat(),
            "schema_version": GOVERNANCE_EVENT_SCHEMA_VERSION,
            **self._payload(),
        }


@dataclass(frozen=True, eq=True)
class ActionProposedEvent(GovernanceEvent):
    """A member proposed a treasury action."""

    event_type: ClassVar[str] = "governance.action.proposed"

    action_id: UUID
    target: str
    description: str

    def _payload(self) -> dict[str, Any]:
        return {
            "action_id": str(self.action_id),
            "target": self.target,
            "description": self.description,
        }


@dataclass(frozen=True, eq=True)
class ActionApprovedEvent(GovernanceEvent):
    """A new distinct approval was recorded.

    Attributes:
        approval_count: Approvals after this one.
        threshold: Team threshold at the time of approval.
    """

    event_type: ClassVar[str] = "governance.action.approved"

    action_id: UUID
    approval_count: int
    threshold: int

    def _payload(self) -> dict[str, Any]:
        return {
            "action_id": str(self.action_id),
            "approval_count": self.approval_count,
            "threshold": self.threshold,
            "threshold_reached": self.approval_count >= self.threshold,
        }


@dataclass(frozen=True, eq=True)
class ActionExecutedEvent(GovernanceEvent):
    """An action executed and its side effect succeeded."""

    event_type: ClassVar[str] = "governance.action.executed"

    action_id: UUID
    execution_reference: str | None

    def _payload(self) -> dict[str, Any]:
        return {
            "action_id": str(self.action_id),
            "execution_reference": self.execution_reference,
        }


@dataclass(frozen=True, eq=True)
class ActionExecutionFailedEvent(GovernanceEvent):
    """An action executed but its side effect failed or timed out.

    Attributes:
        timed_out: True when the collaborator never answered.
        reason: Failure detail.
    """

    event_type: ClassVar[str] = "governance.action.execution_failed"

    action_id: UUID
    reason: str
    timed_out: bool = False

    def _payload(self) -> dict[str, Any]:
        return {
            "action_id": str(self.action_id),
            "reason": self.reason,
            "timed_out": self.timed_out,
        }


@dataclass(frozen=True, eq=True)
class ActionWithdrawnEvent(GovernanceEvent):
    """The proposer withdrew an action."""

    event_type: ClassVar[str] = "governance.action.withdrawn"

    action_id: UUID

    def _payload(self) -> dict[str, Any]:
        return {"action_id": str(self.action_id)}


@dataclass(frozen=True, eq=True)
class ActionReconciledEvent(GovernanceEvent):
    """A reviewer resolved a failed or pending side effect."""

    event_type: ClassVar[str] = "governance.action.reconciled"

    action_id: UUID
    previous_status: str
    execution_reference: str | None
    note: str = ""

    def _payload(self) -> dict[str, Any]:
        return {
            "action_id": str(self.action_id),
            "previous_status": self.previous_status,
            "execution_reference": self.execution_reference,
            "note": self.note,
        }


@dataclass(frozen=True, eq=True)
class ElectionCreatedEvent(GovernanceEvent):
    """An election was scheduled."""

    event_type: ClassVar[str] = "governance.election.created"

    election_id: UUID
    title: str
    start_date: datetime
    end_date: datetime
    seat_count: int

    def _payload(self) -> dict[str, Any]:
        return {
            "election_id": str(self.election_id),
            "title": self.title,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "seat_count": self.seat_count,
        }


@dataclass(frozen=True, eq=True)
class VoteCastEvent(GovernanceEvent):
    """A ballot was recorded.

    The choices are deliberately not part of the payload.
    """

    event_type: ClassVar[str] = "governance.election.vote_cast"

    election_id: UUID
    replaced_previous: bool

    def _payload(self) -> dict[str, Any]:
        return {
            "election_id": str(self.election_id),
            "replaced_previous": self.replaced_previous,
        }


@dataclass(frozen=True, eq=True)
class ElectionPublishedEvent(GovernanceEvent):
    """An election was tallied and its results published."""

    event_type: ClassVar[str] = "governance.election.published"

    election_id: UUID
    winners: tuple[str, ...]
    content_hash: str

    def _payload(self) -> dict[str, Any]:
        return {
            "election_id": str(self.election_id),
            "winners": list(self.winners),
            "content_hash": self.content_hash,
        }
