"""Unit tests for correlation ID context management."""

import asyncio
import uuid

import pytest
from starlette.datastructures import Headers

from schema_api.core.context import (
    correlation_id_from,
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
)


@pytest.mark.unit
class TestCorrelationScope:
    """Tests for correlation_scope()."""

    def test_binds_and_restores(self) -> None:
        """Verify the ID is visible inside the block only."""
        assert get_correlation_id() is None

        with correlation_scope("abc") as correlation_id:
            assert correlation_id == "abc"
            assert get_correlation_id() == "abc"

        assert get_correlation_id() is None

    def test_nested_scopes(self) -> None:
        """Verify an inner scope restores the outer ID."""
        with correlation_scope("outer"):
            with correlation_scope("inner"):
                assert get_correlation_id() == "inner"
            assert get_correlation_id() == "outer"

    def test_restored_after_exception(self) -> None:
        """Verify the ID is unbound even when the block raises."""
        with pytest.raises(RuntimeError), correlation_scope("abc"):
            raise RuntimeError

        assert get_correlation_id() is None

    async def test_isolated_between_tasks(self) -> None:
        """Verify concurrent tasks do not see each other's IDs."""

        async def worker(correlation_id: str) -> str | None:
            with correlation_scope(correlation_id):
                await asyncio.sleep(0)
                return get_correlation_id()

        results = await asyncio.gather(worker("one"), worker("two"))

        assert results == ["one", "two"]
        assert get_correlation_id() is None


@pytest.mark.unit
class TestCorrelationIds:
    """Tests for ID generation and extraction."""

    def test_generated_ids_are_uuid4(self) -> None:
        """Verify generated IDs are unique UUID4 strings."""
        first = generate_correlation_id()

        assert uuid.UUID(first).version == 4
        assert first != generate_correlation_id()

    def test_incoming_header_echoed(self) -> None:
        """Verify the header is read case-insensitively."""
        headers = Headers({"x-correlation-id": "trace-1"})

        assert correlation_id_from(headers) == "trace-1"

    def test_missing_header_generates(self) -> None:
        """Verify an ID is generated when the caller sends none."""
        assert uuid.UUID(correlation_id_from(Headers({}))).version == 4
