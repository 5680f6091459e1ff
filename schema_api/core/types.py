"""Type aliases for dynamic data structures shared by the pipelines.

Parameter bags, header maps and schemas cannot be statically typed beyond
their outer shape, so these aliases give them a name and a single place of
definition.
"""

from collections.abc import Awaitable, Mapping
from typing import Any, Literal, Protocol, TypedDict, runtime_checkable

from pydantic import BaseModel

# JSON-compatible value produced by decoding a request or response body
type JsonValue = (
    dict[str, "JsonValue"] | list["JsonValue"] | str | int | float | bool | None
)

# Outgoing or incoming HTTP headers, already stringified
type HeaderMap = dict[str, str]

# Raw parameter input: a mapping or an instance of the declared model
type ParamsInput = Mapping[str, Any] | BaseModel

# Any type pydantic's TypeAdapter accepts (models, list[Model], str, ...)
type Schema = Any

type HttpMethod = Literal["get", "head", "post", "put", "patch", "delete", "options"]
type BodyType = Literal["JSON", "URLSearchParams"]
type DataType = Literal["JSON", "Text"]

# Header producer result, sync or async
type MaybeAwaitableHeaders = Mapping[str, str] | Awaitable[Mapping[str, str]]


@runtime_checkable
class Logger(Protocol):
    """Optional log sink accepted by the client and server configurations.

    Loguru's ``logger`` and a stdlib ``logging.Logger`` both satisfy it.
    Messages are passed fully formatted.
    """

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def info(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def error(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def exception(self, message: str, *args: Any, **kwargs: Any) -> None: ...


class RequestParams(TypedDict, total=False):
    """Transport options forwarded to httpx for a request.

    ``headers`` are merged into the outgoing headers; the remaining keys are
    passed to ``httpx.AsyncClient.request``.
    """

    headers: dict[str, str]
    timeout: float | None
    follow_redirects: bool


@runtime_checkable
class Auth(Protocol):
    """Produces the authentication headers for an outgoing request.

    ``force_refresh`` is set after a 401 or 403 response so that cached
    credentials are discarded. Implementations may be sync or async.
    """

    def produce_auth_headers(self, force_refresh: bool = False) -> MaybeAwaitableHeaders: ...


@runtime_checkable
class Throttle(Protocol):
    """Paces outgoing requests. Awaited once before each call is sent."""

    async def throttle(self) -> None: ...
