"""Test helpers for governance tests.

Helpers:
    FakeTimeAuthority: Controllable clock for deterministic tests
    GovernanceHarness: Fully wired services over in-memory stubs

Usage:
    from tests.helpers import FakeTimeAuthority, GovernanceHarness
"""

from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.governance_harness import GovernanceHarness

__all__ = ["FakeTimeAuthority", "GovernanceHarness"]
