"""Correlation IDs for routed requests.

The router binds one correlation ID per request with ``correlation_scope``;
handlers and anything they call can read it back with
``get_correlation_id``.
"""

import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar

from schema_api.core.constants import CORRELATION_ID_HEADER

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Return the correlation ID bound to the current context, if any."""
    return _correlation_id_var.get()


def generate_correlation_id() -> str:
    """Generate a new correlation ID.

    Returns:
        str: A string representation of a UUID4.

    Examples:
        >>> len(generate_correlation_id())
        36
    """
    return str(uuid.uuid4())


def correlation_id_from(headers: Mapping[str, str]) -> str:
    """Echo the caller's correlation ID header, or generate one.

    ``headers`` should be case-insensitive (starlette ``Headers``).
    """
    return headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()


@contextmanager
def correlation_scope(correlation_id: str) -> Iterator[str]:
    """Bind ``correlation_id`` for the duration of the block.

    The previous value is restored on exit, so scopes nest.
    """
    token = _correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id_var.reset(token)
