"""Unit tests for the logging module."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import orjson
import pytest
from loguru import logger

from schema_api.core.config import Settings
from schema_api.core.logging import (
    InterceptHandler,
    _format_extra_field,
    _LoggingState,
    _state,
    format_console_with_context,
    serialize_for_json,
    setup_logging,
)

if TYPE_CHECKING:
    from collections.abc import Generator

    from pytest_mock import MockerFixture


def _record(**overrides: Any) -> dict[str, Any]:
    level = type("Level", (), {"name": "INFO"})()
    record: dict[str, Any] = {
        "time": datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=UTC),
        "level": level,
        "message": "Fetched pikachu",
        "name": "schema_api.client.pipeline",
        "function": "execute",
        "line": 42,
        "extra": {},
        "exception": None,
    }
    record.update(overrides)
    return record


@pytest.fixture
def reset_logging_state() -> Generator[None]:
    """Allow setup_logging to run again."""
    _state.configured = False
    yield
    _state.configured = False


@pytest.mark.unit
class TestFormatting:
    """Tests for the console and JSON formatters."""

    def test_logging_state_initialization(self) -> None:
        """Verify a new state starts unconfigured."""
        assert _LoggingState().configured is False

    @pytest.mark.parametrize(
        ("key", "value", "expected"),
        [
            ("correlation_id", "1234567890abcdef", "correlation_id=12345678"),
            ("correlation_id", "short", "correlation_id=short"),
            ("password", "hunter2", "password=[REDACTED]"),
            ("path", "/pokemon/{name}", "path=/pokemon/{{name}}"),
        ],
    )
    def test_format_extra_field(self, key: str, value: str, expected: str) -> None:
        """Verify truncation, redaction and brace escaping."""
        assert _format_extra_field(key, value) == expected

    def test_long_values_are_truncated(self) -> None:
        """Verify long values end with an ellipsis."""
        formatted = _format_extra_field("payload", "x" * 500)

        assert formatted.endswith("...")
        assert len(formatted) < 120

    def test_console_format_orders_priority_fields(self) -> None:
        """Verify the correlation ID is shown before other context."""
        record = _record(
            extra={"status_code": 200, "correlation_id": "abcdef0123456789"}
        )

        formatted = format_console_with_context(record)

        assert formatted.index("correlation_id=") < formatted.index("status_code=")
        assert "abcdef01" in formatted
        assert "abcdef0123" not in formatted
        assert formatted.endswith("\n")

    def test_console_format_includes_exception_placeholder(self) -> None:
        """Verify exceptions are appended through Loguru's field."""
        formatted = format_console_with_context(_record(exception=object()))

        assert "\n{exception}" in formatted

    def test_json_serialization(self) -> None:
        """Verify one JSON object per line with context fields."""
        record = _record(extra={"correlation_id": "abc", "_private": 1})

        line = serialize_for_json(record)
        payload = orjson.loads(line)

        assert line.endswith("\n")
        assert payload["message"] == "Fetched pikachu"
        assert payload["correlation_id"] == "abc"
        assert "_private" not in payload


@pytest.mark.unit
class TestInterceptHandler:
    """Tests for stdlib logging interception."""

    def test_forwards_to_loguru(self) -> None:
        """Verify stdlib records reach Loguru sinks."""
        messages: list[str] = []
        sink_id = logger.add(lambda message: messages.append(message.record["message"]))
        std_logger = logging.getLogger("tests.intercept")
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
        std_logger.setLevel(logging.INFO)

        try:
            std_logger.info("uvicorn started on %s", "127.0.0.1")
        finally:
            logger.remove(sink_id)

        assert messages == ["uvicorn started on 127.0.0.1"]

    def test_unknown_level_uses_number(self) -> None:
        """Verify custom stdlib levels are forwarded by number."""
        levels: list[int] = []
        sink_id = logger.add(lambda message: levels.append(message.record["level"].no))
        std_logger = logging.getLogger("tests.intercept.custom")
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
        std_logger.setLevel(1)

        try:
            std_logger.log(25, "custom level")
        finally:
            logger.remove(sink_id)

        assert levels == [25]


@pytest.mark.unit
@pytest.mark.usefixtures("reset_logging_state")
class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_configures_once(self, mocker: MockerFixture) -> None:
        """Verify repeated calls do not add sinks again."""
        mock_logger = mocker.patch("schema_api.core.logging.logger")
        mocker.patch("schema_api.core.logging.logging.basicConfig")
        settings = Settings()

        setup_logging(settings)
        setup_logging(settings)

        assert mock_logger.add.call_count == 1
        assert _state.configured is True

    def test_json_formatter_selected(
        self, monkeypatch: pytest.MonkeyPatch, mocker: MockerFixture
    ) -> None:
        """Verify the JSON sink replaces the console format when configured."""
        monkeypatch.setenv("SCHEMA_API_LOG_CONFIG__LOG_FORMATTER_TYPE", "json")
        mock_logger = mocker.patch("schema_api.core.logging.logger")
        mocker.patch("schema_api.core.logging.logging.basicConfig")

        setup_logging(Settings())

        call = mock_logger.add.call_args
        assert callable(call.args[0])
        assert "format" not in call.kwargs
        mock_logger.remove.assert_called_once_with()

    def test_console_formatter_selected(self, mocker: MockerFixture) -> None:
        """Verify the console formatter is used in development."""
        mock_logger = mocker.patch("schema_api.core.logging.logger")
        basic_config = mocker.patch("schema_api.core.logging.logging.basicConfig")

        setup_logging(Settings())

        assert mock_logger.add.call_args.kwargs["format"] is format_console_with_context
        handlers = basic_config.call_args.kwargs["handlers"]
        assert isinstance(handlers[0], InterceptHandler)
