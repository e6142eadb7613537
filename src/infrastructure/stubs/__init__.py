"""Infrastructure stubs for development and testing.

Available stubs:
- EntitlementStoreStub / TeamPolicyStoreStub: teams, members and policies
- ActionRepositoryStub: CAS action store with conflict injection
- ElectionRepositoryStub / BallotRepositoryStub: elections and ballots
- ExecutionGatewayStub: configurable outcome (succeed, fail, raise, hang)
- NotificationPublisherStub: recording publisher with a failure switch
"""

from src.infrastructure.stubs.action_repository_stub import ActionRepositoryStub
from src.infrastructure.stubs.election_repository_stub import (
    BallotRepositoryStub,
    ElectionRepositoryStub,
)
from src.infrastructure.stubs.entitlement_store_stub import (
    EntitlementStoreStub,
    TeamPolicyStoreStub,
)
from src.infrastructure.stubs.execution_gateway_stub import (
    ExecutionGatewayConfig,
    ExecutionGatewayMode,
    ExecutionGatewayStub,
)
from src.infrastructure.stubs.notification_publisher_stub import (
    NotificationPublisherStub,
)

__all__: list[str] = [
    "ActionRepositoryStub",
    "BallotRepositoryStub",
    "ElectionRepositoryStub",
    "EntitlementStoreStub",
    "TeamPolicyStoreStub",
    "ExecutionGatewayConfig",
    "ExecutionGatewayMode",
    "ExecutionGatewayStub",
    "NotificationPublisherStub",
]
