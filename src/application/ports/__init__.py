"""Application ports - Interfaces for infrastructure adapters.

Available ports:
- EntitlementStoreProtocol / TeamPolicyStoreProtocol: teams, members, policies
- ActionRepositoryProtocol: treasury actions
- ElectionRepositoryProtocol / BallotRepositoryProtocol: elections and ballots
- ExecutionGatewayProtocol: on-chain execution collaborator
- GovernanceNotificationPublisherProtocol: fire-and-forget notifications
- TimeAuthorityProtocol: the only source of "now"
"""

from src.application.ports.action_repository import ActionRepositoryProtocol
from src.application.ports.election_repository import (
    BallotRepositoryProtocol,
    ElectionRepositoryProtocol,
)
from src.application.ports.entitlement_store import (
    EntitlementStoreProtocol,
    TeamPolicyStoreProtocol,
)
from src.application.ports.execution_gateway import (
    ExecutionGatewayProtocol,
    ExecutionOutcome,
    ExecutionReceipt,
)
from src.application.ports.notification_publisher import (
    GovernanceNotificationPublisherProtocol,
)
from src.application.ports.time_authority import TimeAuthorityProtocol

__all__: list[str] = [
    "ActionRepositoryProtocol",
    "BallotRepositoryProtocol",
    "ElectionRepositoryProtocol",
    "EntitlementStoreProtocol",
    "TeamPolicyStoreProtocol",
    "ExecutionGatewayProtocol",
    "ExecutionOutcome",
    "ExecutionReceipt",
    "GovernanceNotificationPublisherProtocol",
    "TimeAuthorityProtocol",
]
