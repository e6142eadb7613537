"""Unit tests for GovernanceConfig."""

import pytest

from src.config.governance_config import (
    DEFAULT_GOVERNANCE_CONFIG,
    TEST_GOVERNANCE_CONFIG,
    GovernanceConfig,
)
from src.domain.models.role import BOARD_MEMBER_ROLE

_ENV_KEYS = (
    "GOVERNANCE_DEFAULT_APPROVAL_THRESHOLD",
    "GOVERNANCE_EXECUTION_TIMEOUT_SECONDS",
    "GOVERNANCE_CAS_MAX_RETRIES",
    "GOVERNANCE_REJECT_DUPLICATE_APPROVALS",
    "GOVERNANCE_BOARD_ROLE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestDefaults:
    def test_default_values(self) -> None:
        config = GovernanceConfig()

        assert config.default_approval_threshold == 2
        assert config.execution_timeout_seconds == 30.0
        assert config.cas_max_retries == 5
        assert config.reject_duplicate_approvals is False
        assert config.board_role == BOARD_MEMBER_ROLE

    def test_presets(self) -> None:
        assert DEFAULT_GOVERNANCE_CONFIG == GovernanceConfig()
        assert TEST_GOVERNANCE_CONFIG.execution_timeout_seconds < 1


class TestValidation:
    def test_threshold_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="default_approval_threshold"):
            GovernanceConfig(default_approval_threshold=0)

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="execution_timeout_seconds"):
            GovernanceConfig(execution_timeout_seconds=0)

    def test_retries_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="cas_max_retries"):
            GovernanceConfig(cas_max_retries=0)


class TestFromEnvironment:
    def test_no_env_gives_defaults(self) -> None:
        assert GovernanceConfig.from_environment() == GovernanceConfig()

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOVERNANCE_DEFAULT_APPROVAL_THRESHOLD", "3")
        monkeypatch.setenv("GOVERNANCE_EXECUTION_TIMEOUT_SECONDS", "12.5")
        monkeypatch.setenv("GOVERNANCE_CAS_MAX_RETRIES", "9")
        monkeypatch.setenv("GOVERNANCE_REJECT_DUPLICATE_APPROVALS", "Yes")
        monkeypatch.setenv("GOVERNANCE_BOARD_ROLE", "council")

        config = GovernanceConfig.from_environment()

        assert config.default_approval_threshold == 3
        assert config.execution_timeout_seconds == 12.5
        assert config.cas_max_retries == 9
        assert config.reject_duplicate_approvals is True
        assert config.board_role == "council"

    def test_malformed_values_fall_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOVERNANCE_DEFAULT_APPROVAL_THRESHOLD", "two")
        monkeypatch.setenv("GOVERNANCE_EXECUTION_TIMEOUT_SECONDS", "soon")
        monkeypatch.setenv("GOVERNANCE_REJECT_DUPLICATE_APPROVALS", "maybe")

        config = GovernanceConfig.from_environment()

        assert config.default_approval_threshold == 2
        assert config.execution_timeout_seconds == 30.0
        assert config.reject_duplicate_approvals is False

    def test_empty_board_role_disables_seating(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOVERNANCE_BOARD_ROLE", "  ")

        assert GovernanceConfig.from_environment().board_role is None

    def test_invalid_env_value_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GOVERNANCE_CAS_MAX_RETRIES", "0")

        with pytest.raises(ValueError):
            GovernanceConfig.from_environment()
