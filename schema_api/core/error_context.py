"""Sensitive data redaction for request and response logging.

Client debug logs include outgoing headers, which routinely carry
credentials produced by the auth strategies. Everything passed to a log sink
goes through these helpers first; the headers actually sent are unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import lru_cache
from re import Pattern
from typing import Final

from schema_api.core.config import get_settings
from schema_api.core.constants import REDACTED, SENSITIVE_HEADERS

# Default sensitive field patterns - covers common cases
DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|pwd|secret|token|api[_-]?key|apikey|auth|authorization|"
    r"credential|private[_-]?key|access[_-]?key|secret[_-]?key|session)",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def _get_sensitive_fields() -> tuple[str, ...]:
    """Get the configured sensitive fields from settings."""
    return tuple(get_settings().log_config.sensitive_fields)


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data.

    Args:
        field_name: The field name to check.

    Returns:
        bool: True if the field appears to contain sensitive data.
    """
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True

    field_lower = field_name.lower()
    return any(field.lower() in field_lower for field in _get_sensitive_fields())


def is_sensitive_header(header_name: str) -> bool:
    """Check if a header name is sensitive (case-insensitive)."""
    return header_name.lower() in SENSITIVE_HEADERS or is_sensitive_field(header_name)


def sanitize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Return a copy of ``headers`` with sensitive values redacted.

    Args:
        headers: Headers about to be logged.

    Returns:
        dict[str, str]: Headers safe to pass to a log sink.
    """
    if not headers:
        return {}
    return {
        name: REDACTED if is_sensitive_header(name) else value
        for name, value in headers.items()
    }
