"""Unit tests for request correlation ids.

Tests the correlation id context variable and the structlog processor.
"""

import asyncio
import re

import pytest

from src.infrastructure.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


class TestGenerateCorrelationId:
    """Tests for generate_correlation_id function."""

    def test_generate_returns_uuid_format(self) -> None:
        uuid_pattern = re.compile(
            r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
            re.IGNORECASE,
        )
        assert uuid_pattern.match(generate_correlation_id()) is not None

    def test_generate_returns_unique_ids(self) -> None:
        ids = [generate_correlation_id() for _ in range(100)]
        assert len(set(ids)) == 100


class TestCorrelationContext:
    """Tests for get/set of the context variable."""

    @pytest.mark.asyncio
    async def test_set_then_get(self) -> None:
        set_correlation_id("req-1")

        assert get_correlation_id() == "req-1"

    @pytest.mark.asyncio
    async def test_tasks_keep_their_own_id(self) -> None:
        """Each task sees the id it set, not a sibling's."""

        async def handle(correlation_id: str) -> str:
            set_correlation_id(correlation_id)
            await asyncio.sleep(0)
            return get_correlation_id()

        results = await asyncio.gather(handle("a"), handle("b"), handle("c"))

        assert results == ["a", "b", "c"]


class TestCorrelationIdProcessor:
    """Tests for correlation_id_processor."""

    @pytest.mark.asyncio
    async def test_adds_id_when_set(self) -> None:
        set_correlation_id("req-2")

        event = correlation_id_processor(None, "info", {"event": "x"})

        assert event["correlation_id"] == "req-2"

    @pytest.mark.asyncio
    async def test_keeps_explicit_id(self) -> None:
        set_correlation_id("req-3")

        event = correlation_id_processor(
            None, "info", {"event": "x", "correlation_id": "bound"}
        )

        assert event["correlation_id"] == "bound"

    @pytest.mark.asyncio
    async def test_omits_id_when_unset(self) -> None:
        set_correlation_id("")

        event = correlation_id_processor(None, "info", {"event": "x"})

        assert "correlation_id" not in event
