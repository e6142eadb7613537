"""Execution gateway port - the on-chain multisig collaborator.

The action queue hands an executed action's payload to this gateway
exactly once. The gateway must report success or failure explicitly;
timeouts are imposed by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from src.domain.models.action import Action


class ExecutionOutcome(Enum):
    """Outcome reported by the execution collaborator."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ExecutionReceipt:
    """Result of submitting an action to the collaborator.

    Attributes:
        outcome: Whether the side effect took place.
        reference: Collaborator reference (e.g. transaction hash).
        detail: Failure reason or free-form detail.
    """

    outcome: ExecutionOutcome
    reference: str | None = None
    detail: str = ""

    @property
    def succeeded(self) -> bool:
        return self.outcome is ExecutionOutcome.SUCCEEDED


class ExecutionGatewayProtocol(Protocol):
    """Protocol for executing an action's payload against its target."""

    async def submit(self, action: Action) -> ExecutionReceipt:
        """Execute action.data against action.target.

        Args:
            action: The action, already persisted as executed.

        Returns:
            ExecutionReceipt describing the outcome.
        """
        ...
