"""Action queue service - multisig approval and execution of treasury actions.

This module implements the Proposed -> Executed | Withdrawn state
machine for treasury actions.

Invariants:
- approval_count is always the size of the distinct approver set; a
  repeated approval by the same member never increments it
- execute succeeds only while PROPOSED with approval_count >= the
  team's threshold, and succeeds at most once per action
- approve, execute, withdraw and reconcile on one action are
  serialized by a per-action lock and saved with compare-and-swap;
  different actions never share a lock
- execution intent (EXECUTED, side effect PENDING) is persisted BEFORE
  the external collaborator is called, and is never rolled back: a
  failed or timed-out side effect is surfaced as an error and left for
  manual reconciliation

Developer Golden Rules:
1. AUTHORIZE FIRST - consult the entitlement registry before any write
2. READ UNDER LOCK - threshold checks use the snapshot taken inside the
   action's critical section
3. INTENT BEFORE SIDE EFFECT - never call the gateway for an action that
   is not already saved as executed
4. NOTIFY LAST - notifications run after the save and cannot undo it
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from uuid import UUID

from structlog import get_logger
from uuid6 import uuid7

from src.application.dtos.governance import ApprovalResult, ExecutionResult
from src.application.services.governance_notification_service import (
    GovernanceNotificationService,
)
from src.application.services.keyed_lock import KeyedLock
from src.application.services.optimistic_retry import retry_on_conflict
from src.config.governance_config import DEFAULT_GOVERNANCE_CONFIG, GovernanceConfig
from src.domain.errors import (
    ActionNotFoundError,
    ConcurrentModificationError,
    DuplicateApprovalError,
    ExecutionNotAwaitingReviewError,
    ExternalExecutionFailedError,
    ExternalExecutionTimeoutError,
    InsufficientApprovalsError,
    InvalidArgumentError,
    QuorumReachedError,
    UnauthorizedError,
)
from src.domain.events.governance import (
    ActionApprovedEvent,
    ActionExecutedEvent,
    ActionExecutionFailedEvent,
    ActionProposedEvent,
    ActionReconciledEvent,
    ActionWithdrawnEvent,
)
from src.domain.models.action import Action, ExecutionStatus
from src.domain.models.member import TeamPolicy
from src.domain.models.role import Permission

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from src.application.ports.action_repository import ActionRepositoryProtocol
    from src.application.ports.entitlement_store import TeamPolicyStoreProtocol
    from src.application.ports.execution_gateway import ExecutionGatewayProtocol
    from src.application.ports.time_authority import TimeAuthorityProtocol
    from src.application.services.entitlement_registry_service import (
        EntitlementRegistryService,
    )

logger = get_logger(__name__)


class ActionQueueService:
    """Holds proposed treasury actions and enforces approval and execution rules.

    Example:
        >>> queue = ActionQueueService(
        ...     repository=action_repo,
        ...     registry=registry,
        ...     policy_store=policy_store,
        ...     execution_gateway=gateway,
        ...     time_authority=clock,
        ... )
        >>> action = await queue.propose("team-1", "0xA", "0xVault", "Pay audit", b"...")
        >>> await queue.approve(action.id, "0xB")
        >>> await queue.approve(action.id, "0xC")
        >>> result = await queue.execute(action.id, "0xB")
    """

    def __init__(
        self,
        repository: ActionRepositoryProtocol,
        registry: EntitlementRegistryService,
        policy_store: TeamPolicyStoreProtocol,
        execution_gateway: ExecutionGatewayProtocol,
        time_authority: TimeAuthorityProtocol,
        notifier: GovernanceNotificationService | None = None,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
        locks: KeyedLock | None = None,
    ) -> None:
        """Initialize the action queue.

        Args:
            repository: Action persistence with CAS saves.
            registry: Entitlement registry for permission checks.
            policy_store: Per-team threshold settings.
            execution_gateway: External on-chain execution collaborator.
            time_authority: Clock for all timestamps.
            notifier: Fire-and-forget event delivery. If not provided,
                events are dropped after logging.
            config: Engine configuration (default threshold, timeouts,
                retry budget, duplicate-approval policy).
            locks: Per-action lock registry. A private one is created if
                not provided.
        """
        self._repository = repository
        self._registry = registry
        self._policies = policy_store
        self._gateway = execution_gateway
        self._time = time_authority
        self._notifier = notifier or GovernanceNotificationService()
        self._config = config
        self._locks = locks or KeyedLock()

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_action(self, action_id: UUID) -> Action:
        """Return an action.

        Raises:
            ActionNotFoundError: If the action is unknown.
        """
        action = await self._repository.get(action_id)
        if action is None:
            raise ActionNotFoundError(action_id)
        return action

    async def list_actions(
        self,
        team_id: str,
        is_executed: bool | None = None,
    ) -> list[Action]:
        """List a team's actions, newest first, optionally by executed flag."""
        return await self._repository.list_by_team(team_id, is_executed=is_executed)

    async def has_approved(self, action_id: UUID, member: str) -> bool:
        """Check whether a member has approved an action."""
        return (await self.get_action(action_id)).has_approved(member)

    async def threshold(self, team_id: str) -> int:
        """Return the team's approval threshold (configured default if unset)."""
        policy = await self._policies.get_policy(team_id)
        if policy is None:
            return self._config.default_approval_threshold
        return policy.approval_threshold

    # =========================================================================
    # Commands
    # =========================================================================

    async def set_threshold(
        self,
        team_id: str,
        threshold: int,
        changed_by: str,
    ) -> TeamPolicy:
        """Change a team's approval threshold.

        Recorded approvals are never reset by a threshold change.

        Raises:
            UnauthorizedError: Caller lacks canManageRoles.
            InvalidArgumentError: Threshold below 1.
        """
        await self._registry.require(team_id, changed_by, Permission.CAN_MANAGE_ROLES)
        if threshold < 1:
            raise InvalidArgumentError("threshold", f"must be at least 1, got {threshold}")
        policy = TeamPolicy(
            team_id=team_id,
            approval_threshold=threshold,
            updated_at=self._time.utcnow(),
            updated_by=changed_by,
        )
        await self._policies.save_policy(policy)
        logger.info(
            "Approval threshold changed",
            team_id=team_id,
            threshold=threshold,
            changed_by=changed_by,
        )
        return policy

    async def propose(
        self,
        team_id: str,
        proposer: str,
        target: str,
        description: str,
        data: bytes = b"",
    ) -> Action:
        """Create a new action in PROPOSED state with no approvals.

        Args:
            team_id: Owning team.
            proposer: Caller; must hold canPropose.
            target: Destination identifier.
            description: Human-readable purpose.
            data: Opaque payload to execute against the target.

        Returns:
            The new action, with a freshly assigned UUIDv7 id.

        Raises:
            UnauthorizedError: Caller lacks canPropose.
            InvalidArgumentError: Empty target or oversized description.
        """
        log = logger.bind(team_id=team_id, proposer=proposer)
        await self._registry.require(team_id, proposer, Permission.CAN_PROPOSE)

        if not target or not target.strip():
            raise InvalidArgumentError("target", "must be non-empty")
        if len(description) > Action.MAX_DESCRIPTION_LENGTH:
            raise InvalidArgumentError(
                "description",
                f"exceeds {Action.MAX_DESCRIPTION_LENGTH} characters",
            )

        now = self._time.utcnow()
        action = Action(
            id=uuid7(),
            team_id=team_id,
            proposer=proposer,
            target=target,
            description=description,
            data=bytes(data),
            created_at=now,
        )
        await self._repository.add(action)
        log.info("Action proposed", action_id=str(action.id), target=target)

        await self._notifier.publish(
            ActionProposedEvent(
                team_id=team_id,
                actor=proposer,
                occurred_at=now,
                action_id=action.id,
                target=target,
                description=description,
            )
        )
        return action

    async def approve(self, action_id: UUID, approver: str) -> ApprovalResult:
        """Record an approval.

        A repeated approval by the same member is a no-op returning the
        current count, unless duplicate approvals are configured to be
        rejected.

        Args:
            action_id: Action to approve.
            approver: Caller; must hold canApprove in the action's team.

        Returns:
            ApprovalResult with the updated approval count.

        Raises:
            ActionNotFoundError: Action is unknown.
            UnauthorizedError: Caller lacks canApprove.
            ActionAlreadyExecutedError: Action is executed.
            ActionAlreadyWithdrawnError: Action is withdrawn.
            DuplicateApprovalError: Re-approval with rejection enabled.
        """
        log = logger.bind(action_id=str(action_id), approver=approver)

        async with self._locks.hold(action_id):
            action, result = await retry_on_conflict(
                lambda: self._approve_once(action_id, approver),
                max_attempts=self._config.cas_max_retries,
                operation_name="approve",
            )

        if not result.recorded:
            log.info("Duplicate approval ignored", approval_count=result.approval_count)
            return result

        log.info(
            "Approval recorded",
            approval_count=result.approval_count,
            threshold=result.threshold,
        )
        await self._notifier.publish(
            ActionApprovedEvent(
                team_id=action.team_id,
                actor=approver,
                occurred_at=self._time.utcnow(),
                action_id=action_id,
                approval_count=result.approval_count,
                threshold=result.threshold,
            )
        )
        return result

    async def execute(self, action_id: UUID, executor: str) -> ExecutionResult:
        """Execute an approved action.

        The action is saved as EXECUTED with a PENDING side effect before
        the gateway is called. The gateway is called exactly once.

        Args:
            action_id: Action to execute.
            executor: Caller; must hold canExecute in the action's team.

        Returns:
            ExecutionResult when the side effect succeeded.

        Raises:
            ActionNotFoundError: Action is unknown.
            UnauthorizedError: Caller lacks canExecute.
            ActionAlreadyExecutedError: Action is executed.
            ActionAlreadyWithdrawnError: Action is withdrawn.
            InsufficientApprovalsError: Approvals below the threshold.
            ExternalExecutionTimeoutError: Gateway did not answer in time;
                action stays executed with side effect pending.
            ExternalExecutionFailedError: Gateway reported or raised a
                failure; action stays executed with side effect failed.
        """
        log = logger.bind(action_id=str(action_id), executor=executor)

        async with self._locks.hold(action_id):
            action = await retry_on_conflict(
                lambda: self._record_execution_intent(action_id, executor),
                max_attempts=self._config.cas_max_retries,
                operation_name="execute",
            )
        log.info(
            "Execution intent recorded",
            team_id=action.team_id,
            approval_count=action.approval_count,
        )

        return await self._dispatch(action, executor, log)

    async def withdraw(self, action_id: UUID, proposer: str) -> Action:
        """Withdraw an action before it reaches its threshold.

        Args:
            action_id: Action to withdraw.
            proposer: Caller; must be the action's original proposer.

        Returns:
            The withdrawn action.

        Raises:
            ActionNotFoundError: Action is unknown.
            UnauthorizedError: Caller is not the proposer.
            ActionAlreadyExecutedError: Action is executed.
            ActionAlreadyWithdrawnError: Action is already withdrawn.
            QuorumReachedError: Approvals already meet the threshold.
        """
        async with self._locks.hold(action_id):
            action = await retry_on_conflict(
                lambda: self._withdraw_once(action_id, proposer),
                max_attempts=self._config.cas_max_retries,
                operation_name="withdraw",
            )
        logger.info("Action withdrawn", action_id=str(action_id), proposer=proposer)

        await self._notifier.publish(
            ActionWithdrawnEvent(
                team_id=action.team_id,
                actor=proposer,
                occurred_at=self._time.utcnow(),
                action_id=action_id,
            )
        )
        return action

    async def reconcile_execution(
        self,
        action_id: UUID,
        reviewer: str,
        reference: str | None = None,
        note: str = "",
    ) -> Action:
        """Resolve a failed or pending side effect after manual review.

        Never calls the gateway again: reconciliation records the outcome
        of an off-system investigation.

        Args:
            action_id: Executed action under review.
            reviewer: Caller; must hold canExecute.
            reference: Reference of the compensating or confirmed transaction.
            note: Free-form review note.

        Returns:
            The action with execution status RECONCILED.

        Raises:
            ActionNotFoundError: Action is unknown.
            UnauthorizedError: Caller lacks canExecute.
            ExecutionNotAwaitingReviewError: Side effect is not failed or pending.
        """

        async def attempt() -> tuple[Action, ExecutionStatus]:
            current = await self.get_action(action_id)
            await self._registry.require(current.team_id, reviewer, Permission.CAN_EXECUTE)
            if not current.is_executed or not current.execution_status.awaits_review():
                raise ExecutionNotAwaitingReviewError(
                    action_id, current.execution_status.value
                )
            saved = await self._repository.save(
                current.with_execution_status(ExecutionStatus.RECONCILED, reference),
                expected_version=current.version,
            )
            return saved, current.execution_status

        async with self._locks.hold(action_id):
            action, previous = await retry_on_conflict(
                attempt,
                max_attempts=self._config.cas_max_retries,
                operation_name="reconcile_execution",
            )
        logger.info(
            "Execution reconciled",
            action_id=str(action_id),
            reviewer=reviewer,
            previous_status=previous.value,
        )

        await self._notifier.publish(
            ActionReconciledEvent(
                team_id=action.team_id,
                actor=reviewer,
                occurred_at=self._time.utcnow(),
                action_id=action_id,
                previous_status=previous.value,
                execution_reference=action.execution_reference,
                note=note,
            )
        )
        return action

    # =========================================================================
    # Single-attempt operations (run under the action lock, retried on CAS)
    # =========================================================================

    async def _approve_once(
        self,
        action_id: UUID,
        approver: str,
    ) -> tuple[Action, ApprovalResult]:
        action = await self.get_action(action_id)
        await self._registry.require(action.team_id, approver, Permission.CAN_APPROVE)
        action.ensure_proposed()
        threshold = await self.threshold(action.team_id)

        if action.has_approved(approver):
            if self._config.reject_duplicate_approvals:
                raise DuplicateApprovalError(action_id, approver, action.approval_count)
            return action, ApprovalResult(
                action_id=action_id,
                approver=approver,
                approval_count=action.approval_count,
                threshold=threshold,
                recorded=False,
            )

        saved = await self._repository.save(
            action.with_approval(approver), expected_version=action.version
        )
        return saved, ApprovalResult(
            action_id=action_id,
            approver=approver,
            approval_count=saved.approval_count,
            threshold=threshold,
            recorded=True,
        )

    async def _record_execution_intent(self, action_id: UUID, executor: str) -> Action:
        action = await self.get_action(action_id)
        await self._registry.require(action.team_id, executor, Permission.CAN_EXECUTE)
        action.ensure_proposed()

        threshold = await self.threshold(action.team_id)
        if action.approval_count < threshold:
            logger.warning(
                "Execution rejected below threshold",
                action_id=str(action_id),
                approval_count=action.approval_count,
                threshold=threshold,
            )
            raise InsufficientApprovalsError(action_id, action.approval_count, threshold)

        return await self._repository.save(
            action.mark_executed(executor, self._time.utcnow()),
            expected_version=action.version,
        )

    async def _withdraw_once(self, action_id: UUID, proposer: str) -> Action:
        action = await self.get_action(action_id)
        if action.proposer != proposer:
            raise UnauthorizedError(action.team_id, proposer, "withdraw (proposer only)")
        action.ensure_proposed()

        threshold = await self.threshold(action.team_id)
        if action.approval_count >= threshold:
            raise QuorumReachedError(action_id, action.approval_count, threshold)

        return await self._repository.save(
            action.mark_withdrawn(self._time.utcnow()),
            expected_version=action.version,
        )

    # =========================================================================
    # External side effect
    # =========================================================================

    async def _dispatch(
        self,
        action: Action,
        executor: str,
        log: FilteringBoundLogger,
    ) -> ExecutionResult:
        """Call the gateway once and record the outcome on the executed action."""
        timeout = self._config.execution_timeout_seconds
        try:
            receipt = await asyncio.wait_for(self._gateway.submit(action), timeout=timeout)
        except asyncio.TimeoutError:
            log.error("External execution timed out, side effect pending", timeout=timeout)
            await self._notifier.publish(
                ActionExecutionFailedEvent(
                    team_id=action.team_id,
                    actor=executor,
                    occurred_at=self._time.utcnow(),
                    action_id=action.id,
                    reason=f"timeout after {timeout}s",
                    timed_out=True,
                )
            )
            raise ExternalExecutionTimeoutError(action.id, timeout) from None
        except Exception as exc:
            reason = f"{type(exc).__name__}: {exc}"
            await self._record_failure(action, executor, reason, log)
            raise ExternalExecutionFailedError(action.id, reason) from exc

        if not receipt.succeeded:
            reason = receipt.detail or "execution gateway reported failure"
            await self._record_failure(action, executor, reason, log, receipt.reference)
            raise ExternalExecutionFailedError(action.id, reason)

        saved = await self._settle_execution(
            action.id, ExecutionStatus.SUCCEEDED, receipt.reference
        )
        log.info("Action executed", execution_reference=receipt.reference)
        await self._notifier.publish(
            ActionExecutedEvent(
                team_id=action.team_id,
                actor=executor,
                occurred_at=self._time.utcnow(),
                action_id=action.id,
                execution_reference=receipt.reference,
            )
        )
        return ExecutionResult(
            action=saved,
            execution_status=saved.execution_status,
            execution_reference=saved.execution_reference,
        )

    async def _record_failure(
        self,
        action: Action,
        executor: str,
        reason: str,
        log: FilteringBoundLogger,
        reference: str | None = None,
    ) -> None:
        """Mark the side effect FAILED and announce it.

        If the status cannot be saved, it stays PENDING (still open to
        reconciliation) and the caller still reports the gateway failure.
        """
        try:
            await self._settle_execution(action.id, ExecutionStatus.FAILED, reference)
        except ConcurrentModificationError as exc:
            log.error(
                "Could not record failed execution, side effect left pending",
                reason=reason,
                error=str(exc),
            )
        log.error("External execution failed, manual review required", reason=reason)
        await self._notifier.publish(
            ActionExecutionFailedEvent(
                team_id=action.team_id,
                actor=executor,
                occurred_at=self._time.utcnow(),
                action_id=action.id,
                reason=reason,
            )
        )

    async def _settle_execution(
        self,
        action_id: UUID,
        status: ExecutionStatus,
        reference: str | None,
    ) -> Action:
        """Move a PENDING side effect to its final status.

        If a reviewer reconciled the action while the gateway call was in
        flight, the reviewer's record stands and is returned unchanged.
        """

        async def attempt() -> Action:
            current = await self.get_action(action_id)
            if current.execution_status is not ExecutionStatus.PENDING:
                logger.warning(
                    "Execution status changed during dispatch",
                    action_id=str(action_id),
                    current_status=current.execution_status.value,
                    reported_status=status.value,
                )
                return current
            return await self._repository.save(
                current.with_execution_status(status, reference),
                expected_version=current.version,
            )

        async with self._locks.hold(action_id):
            return await retry_on_conflict(
                attempt,
                max_attempts=self._config.cas_max_retries,
                operation_name="settle_execution",
            )
