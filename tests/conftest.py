"""
Pytest configuration and shared fixtures for governance tests.

Testing Standards:
- Async tests run under pytest-asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for ports whose behavior is not under test
- Use the in-memory stubs and FakeTimeAuthority everywhere else
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

import pytest

from tests.helpers import FakeTimeAuthority, GovernanceHarness


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from src import __version__

    return __version__


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Clock frozen at 2026-01-01T00:00:00Z."""
    return FakeTimeAuthority()


@pytest.fixture
def harness(fake_time_authority: FakeTimeAuthority) -> GovernanceHarness:
    """Services wired over fresh stubs, sharing the fake clock."""
    return GovernanceHarness(clock=fake_time_authority)
