"""Bootstrap wiring for governance dependencies.

Module-level singletons, created lazily on first use. Ports default to
the in-memory stubs; tests and deployments replace them with the set_*
functions before the first service getter is called.
"""

from __future__ import annotations

from src.application.ports.action_repository import ActionRepositoryProtocol
from src.application.ports.election_repository import (
    BallotRepositoryProtocol,
    ElectionRepositoryProtocol,
)
from src.application.ports.entitlement_store import (
    EntitlementStoreProtocol,
    TeamPolicyStoreProtocol,
)
from src.application.ports.execution_gateway import ExecutionGatewayProtocol
from src.application.ports.notification_publisher import (
    GovernanceNotificationPublisherProtocol,
)
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.action_queue_service import ActionQueueService
from src.application.services.election_engine_service import ElectionEngineService
from src.application.services.entitlement_registry_service import (
    EntitlementRegistryService,
)
from src.application.services.governance_facade import GovernanceFacade
from src.application.services.governance_notification_service import (
    GovernanceNotificationService,
)
from src.config.governance_config import GovernanceConfig
from src.infrastructure.adapters.clock import SystemTimeAuthority
from src.infrastructure.observability import get_logger_for_service
from src.infrastructure.stubs.action_repository_stub import ActionRepositoryStub
from src.infrastructure.stubs.election_repository_stub import (
    BallotRepositoryStub,
    ElectionRepositoryStub,
)
from src.infrastructure.stubs.entitlement_store_stub import (
    EntitlementStoreStub,
    TeamPolicyStoreStub,
)
from src.infrastructure.stubs.execution_gateway_stub import ExecutionGatewayStub

_config: GovernanceConfig | None = None
_time_authority: TimeAuthorityProtocol | None = None
_entitlement_store: EntitlementStoreProtocol | None = None
_policy_store: TeamPolicyStoreProtocol | None = None
_action_repository: ActionRepositoryProtocol | None = None
_election_repository: ElectionRepositoryProtocol | None = None
_ballot_repository: BallotRepositoryProtocol | None = None
_execution_gateway: ExecutionGatewayProtocol | None = None
_notification_publisher: GovernanceNotificationPublisherProtocol | None = None
_facade: GovernanceFacade | None = None


def get_governance_config() -> GovernanceConfig:
    """Get engine configuration (read from the environment once)."""
    global _config
    if _config is None:
        _config = GovernanceConfig.from_environment()
    return _config


def get_time_authority() -> TimeAuthorityProtocol:
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_entitlement_store() -> EntitlementStoreProtocol:
    global _entitlement_store
    if _entitlement_store is None:
        _entitlement_store = EntitlementStoreStub()
    return _entitlement_store


def get_policy_store() -> TeamPolicyStoreProtocol:
    global _policy_store
    if _policy_store is None:
        _policy_store = TeamPolicyStoreStub()
    return _policy_store


def get_action_repository() -> ActionRepositoryProtocol:
    global _action_repository
    if _action_repository is None:
        _action_repository = ActionRepositoryStub()
    return _action_repository


def get_election_repository() -> ElectionRepositoryProtocol:
    global _election_repository
    if _election_repository is None:
        _election_repository = ElectionRepositoryStub()
    return _election_repository


def get_ballot_repository() -> BallotRepositoryProtocol:
    global _ballot_repository
    if _ballot_repository is None:
        _ballot_repository = BallotRepositoryStub()
    return _ballot_repository


def get_execution_gateway() -> ExecutionGatewayProtocol:
    global _execution_gateway
    if _execution_gateway is None:
        _execution_gateway = ExecutionGatewayStub()
    return _execution_gateway


def get_governance_facade() -> GovernanceFacade:
    """Get the governance facade, wiring all services on first use."""
    global _facade
    if _facade is None:
        config = get_governance_config()
        clock = get_time_authority()
        notifier = GovernanceNotificationService(_notification_publisher)
        registry = EntitlementRegistryService(
            store=get_entitlement_store(),
            time_authority=clock,
            cas_max_retries=config.cas_max_retries,
        )
        _facade = GovernanceFacade(
            registry=registry,
            action_queue=ActionQueueService(
                repository=get_action_repository(),
                registry=registry,
                policy_store=get_policy_store(),
                execution_gateway=get_execution_gateway(),
                time_authority=clock,
                notifier=notifier,
                config=config,
            ),
            election_engine=ElectionEngineService(
                elections=get_election_repository(),
                ballots=get_ballot_repository(),
                registry=registry,
                time_authority=clock,
                notifier=notifier,
                config=config,
            ),
            config=config,
        )
        get_logger_for_service("GovernanceFacade").info(
            "Governance facade wired",
            default_approval_threshold=config.default_approval_threshold,
            execution_timeout_seconds=config.execution_timeout_seconds,
            board_role=config.board_role,
            notifications=_notification_publisher is not None,
        )
    return _facade


def reset_governance_dependencies() -> None:
    """Reset all singleton instances for testing."""
    global _config
    global _time_authority
    global _entitlement_store
    global _policy_store
    global _action_repository
    global _election_repository
    global _ballot_repository
    global _execution_gateway
    global _notification_publisher
    global _facade

    _config = None
    _time_authority = None
    _entitlement_store = None
    _policy_store = None
    _action_repository = None
    _election_repository = None
    _ballot_repository = None
    _execution_gateway = None
    _notification_publisher = None
    _facade = None


def set_governance_config(config: GovernanceConfig) -> None:
    """Set custom configuration for testing."""
    global _config
    _config = config


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    """Set custom clock for testing."""
    global _time_authority
    _time_authority = time_authority


def set_execution_gateway(gateway: ExecutionGatewayProtocol) -> None:
    """Set custom execution gateway for testing."""
    global _execution_gateway
    _execution_gateway = gateway


def set_notification_publisher(
    publisher: GovernanceNotificationPublisherProtocol,
) -> None:
    """Set the notification publisher (none by default)."""
    global _notification_publisher
    _notification_publisher = publisher
