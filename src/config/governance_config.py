"""Governance engine configuration.

This module defines engine-wide settings with environment variable
overrides for production tuning. Per-team settings (the approval
threshold) live in TeamPolicy; the value here is only the default for
teams without a policy.

Environment Variables:
- GOVERNANCE_DEFAULT_APPROVAL_THRESHOLD: Approvals needed when a team has
  no policy (default: 2)
- GOVERNANCE_EXECUTION_TIMEOUT_SECONDS: Bound on the external execution
  call (default: 30.0)
- GOVERNANCE_CAS_MAX_RETRIES: Attempts per operation when a
  compare-and-swap save conflicts (default: 5)
- GOVERNANCE_REJECT_DUPLICATE_APPROVALS: "true" to raise on re-approval
  instead of returning the current count (default: false)
- GOVERNANCE_BOARD_ROLE: Role seated with election winners on
  publication; empty disables seating (default: board_member)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from src.domain.models.role import BOARD_MEMBER_ROLE

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable with default.

    Accepts 1/true/yes/on and 0/false/no/off, case-insensitively.
    Anything else yields the default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


@dataclass(frozen=True)
class GovernanceConfig:
    """Configuration for the action queue and election engine.

    Attributes:
        default_approval_threshold: Distinct approvals required to execute
            an action when the team has no explicit policy.
        execution_timeout_seconds: How long execute() waits for the
            external collaborator before reporting a timeout.
        cas_max_retries: Attempts per read-modify-write before a conflict
            surfaces as ConcurrentModificationError.
        reject_duplicate_approvals: Raise DuplicateApprovalError on
            re-approval instead of returning the unchanged count.
        board_role: Role whose holders are replaced by election winners
            when results are published. None disables seating.
    """

    default_approval_threshold: int = 2
    execution_timeout_seconds: float = 30.0
    cas_max_retries: int = 5
    reject_duplicate_approvals: bool = False
    board_role: str | None = BOARD_MEMBER_ROLE

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.default_approval_threshold < 1:
            raise ValueError(
                "default_approval_threshold must be at least 1, "
                f"got {self.default_approval_threshold}"
            )
        if self.execution_timeout_seconds <= 0:
            raise ValueError(
                "execution_timeout_seconds must be positive, "
                f"got {self.execution_timeout_seconds}"
            )
        if self.cas_max_retries < 1:
            raise ValueError(
                f"cas_max_retries must be at least 1, got {self.cas_max_retries}"
            )

    @classmethod
    def from_environment(cls) -> GovernanceConfig:
        """Create config from environment variables with defaults.

        Returns:
            GovernanceConfig with values from environment or defaults.
        """
        board_role = os.environ.get("GOVERNANCE_BOARD_ROLE", BOARD_MEMBER_ROLE).strip()
        return cls(
            default_approval_threshold=_get_int_env(
                "GOVERNANCE_DEFAULT_APPROVAL_THRESHOLD", 2
            ),
            execution_timeout_seconds=_get_float_env(
                "GOVERNANCE_EXECUTION_TIMEOUT_SECONDS", 30.0
            ),
            cas_max_retries=_get_int_env("GOVERNANCE_CAS_MAX_RETRIES", 5),
            reject_duplicate_approvals=_get_bool_env(
                "GOVERNANCE_REJECT_DUPLICATE_APPROVALS", False
            ),
            board_role=board_role or None,
        )


# Pre-defined configurations for common use cases

# Default production config
DEFAULT_GOVERNANCE_CONFIG = GovernanceConfig()

# Testing config with a short execution timeout
TEST_GOVERNANCE_CONFIG = GovernanceConfig(
    default_approval_threshold=2,
    execution_timeout_seconds=0.2,
    cas_max_retries=3,
)
