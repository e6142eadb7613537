"""Stub ExecutionGateway for development/testing.

Production submits the action payload to the team's on-chain multisig.
This stub records every submission and lets tests choose the outcome.

Configurable Test Modes:
- SUCCEED: Returns a SUCCEEDED receipt with a generated reference
- FAIL: Returns a FAILED receipt
- RAISE: Raises RuntimeError from submit()
- HANG: Never answers (until released), to exercise caller timeouts

Usage Examples:
    # Basic usage (always succeeds)
    stub = ExecutionGatewayStub()

    # Collaborator reports failure
    stub = ExecutionGatewayStub.with_failure("insufficient funds")

    # Collaborator crashes
    stub = ExecutionGatewayStub.with_error("RPC unavailable")

    # Collaborator never answers
    stub = ExecutionGatewayStub.hanging()
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from src.application.ports.execution_gateway import (
    ExecutionOutcome,
    ExecutionReceipt,
)
from src.domain.models.action import Action


class ExecutionGatewayMode(Enum):
    """Configurable modes for ExecutionGatewayStub behavior."""

    SUCCEED = "succeed"
    FAIL = "fail"
    RAISE = "raise"
    HANG = "hang"


@dataclass
class ExecutionGatewayConfig:
    """Configuration for ExecutionGatewayStub behavior.

    Attributes:
        mode: The operating mode for the stub.
        detail: Failure detail (FAIL) or exception message (RAISE).
        delay_seconds: Artificial latency before answering.
    """

    mode: ExecutionGatewayMode = ExecutionGatewayMode.SUCCEED
    detail: str = ""
    delay_seconds: float = 0.0


class ExecutionGatewayStub:
    """Configurable stub implementation of ExecutionGatewayProtocol.

    Attributes:
        submitted: Ids of every action submitted, in call order.
    """

    def __init__(self, config: ExecutionGatewayConfig | None = None) -> None:
        self._config = config or ExecutionGatewayConfig()
        self._release = asyncio.Event()
        self.submitted: list[UUID] = []

    # --- Factory methods for common test scenarios ---

    @classmethod
    def with_failure(cls, detail: str = "execution reverted") -> ExecutionGatewayStub:
        return cls(ExecutionGatewayConfig(mode=ExecutionGatewayMode.FAIL, detail=detail))

    @classmethod
    def with_error(cls, detail: str = "gateway unavailable") -> ExecutionGatewayStub:
        return cls(ExecutionGatewayConfig(mode=ExecutionGatewayMode.RAISE, detail=detail))

    @classmethod
    def hanging(cls) -> ExecutionGatewayStub:
        """Create stub whose submit() blocks until release() is called."""
        return cls(ExecutionGatewayConfig(mode=ExecutionGatewayMode.HANG))

    def set_mode(self, mode: ExecutionGatewayMode, detail: str = "") -> None:
        self._config = ExecutionGatewayConfig(
            mode=mode, detail=detail, delay_seconds=self._config.delay_seconds
        )

    def release(self) -> None:
        """Let hanging submissions complete successfully."""
        self._release.set()

    @property
    def call_count(self) -> int:
        return len(self.submitted)

    async def submit(self, action: Action) -> ExecutionReceipt:
        self.submitted.append(action.id)
        if self._config.delay_seconds:
            await asyncio.sleep(self._config.delay_seconds)

        mode = self._config.mode
        if mode is ExecutionGatewayMode.HANG:
            await self._release.wait()
        elif mode is ExecutionGatewayMode.RAISE:
            raise RuntimeError(self._config.detail or "gateway unavailable")
        elif mode is ExecutionGatewayMode.FAIL:
            return ExecutionReceipt(
                outcome=ExecutionOutcome.FAILED,
                detail=self._config.detail or "execution reverted",
            )

        return ExecutionReceipt(
            outcome=ExecutionOutcome.SUCCEEDED,
            reference=f"0x{action.id.hex}",
        )

    def clear(self) -> None:
        """Reset recorded submissions (for test cleanup)."""
        self.submitted.clear()
