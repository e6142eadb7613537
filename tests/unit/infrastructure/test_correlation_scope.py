"""Unit tests for correlation ID management."""

import asyncio
from uuid import UUID

from src.infrastructure.observability.correlation import (
    correlation_id_processor,
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


class TestGenerateCorrelationId:
    def test_generates_uuid7(self) -> None:
        assert UUID(generate_correlation_id()).version == 7

    def test_ids_are_unique(self) -> None:
        assert len({generate_correlation_id() for _ in range(100)}) == 100


class TestCorrelationScope:
    def test_scope_uses_supplied_id_and_restores(self) -> None:
        set_correlation_id("")

        with correlation_scope("req-42") as value:
            assert value == "req-42"
            assert get_correlation_id() == "req-42"

        assert get_correlation_id() == ""

    def test_scope_generates_id_when_missing(self) -> None:
        with correlation_scope(None) as value:
            assert value
            assert get_correlation_id() == value

    def test_nested_scopes_restore_outer(self) -> None:
        with correlation_scope("outer"):
            with correlation_scope("inner"):
                assert get_correlation_id() == "inner"
            assert get_correlation_id() == "outer"

    async def test_tasks_keep_their_own_ids(self) -> None:
        async def worker(name: str) -> str:
            with correlation_scope(name):
                await asyncio.sleep(0.01)
                return get_correlation_id()

        assert await asyncio.gather(worker("a"), worker("b")) == ["a", "b"]


class TestCorrelationIdProcessor:
    def test_adds_id_when_set(self) -> None:
        with correlation_scope("req-1"):
            event = correlation_id_processor(None, "info", {"event": "x"})

        assert event == {"event": "x", "correlation_id": "req-1"}

    def test_leaves_entry_alone_without_id(self) -> None:
        set_correlation_id("")

        assert correlation_id_processor(None, "info", {"event": "x"}) == {"event": "x"}
