"""Application services - Use case orchestration.

Available services:
- EntitlementRegistryService: who may act (roles and permissions)
- ActionQueueService: multisig approval and execution of treasury actions
- ElectionEngineService: candidates, ballots and deterministic tallies
- GovernanceFacade: single entry point with a stable error taxonomy
- GovernanceNotificationService: failure-isolated event delivery
"""

from src.application.services.action_queue_service import ActionQueueService
from src.application.services.election_engine_service import ElectionEngineService
from src.application.services.entitlement_registry_service import (
    EntitlementRegistryService,
)
from src.application.services.governance_facade import (
    ErrorKind,
    GovernanceFacade,
    GovernanceFailure,
    classify,
)
from src.application.services.governance_notification_service import (
    GovernanceNotificationService,
)
from src.application.services.keyed_lock import KeyedLock
from src.application.services.optimistic_retry import retry_on_conflict

__all__: list[str] = [
    "ActionQueueService",
    "ElectionEngineService",
    "EntitlementRegistryService",
    "ErrorKind",
    "GovernanceFacade",
    "GovernanceFailure",
    "GovernanceNotificationService",
    "KeyedLock",
    "classify",
    "retry_on_conflict",
]
