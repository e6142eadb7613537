"""Configuration module for the governance engine.

Available Configurations:
- GovernanceConfig: thresholds, execution timeout, CAS retries, board role
"""

from src.config.governance_config import (
    DEFAULT_GOVERNANCE_CONFIG,
    TEST_GOVERNANCE_CONFIG,
    GovernanceConfig,
)

__all__: list[str] = [
    "DEFAULT_GOVERNANCE_CONFIG",
    "TEST_GOVERNANCE_CONFIG",
    "GovernanceConfig",
]
