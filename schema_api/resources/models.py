"""Declarative API configuration models.

A configuration maps resource names to a path and a set of actions keyed by
HTTP method. The same ``ApiConfig`` drives ``ApiClient`` and ``ApiRouter``;
``ClientConfig`` and ``ServerConfig`` add the side-specific options.

Example:
    >>> class PokemonName(BaseModel):
    ...     name: str
    >>> config = ApiConfig(
    ...     resources={
    ...         "pokemon": resource(
    ...             "/pokemon/{name}",
    ...             {"get": ActionConfig(data_schema=Pokemon)},
    ...             url_params_schema=PokemonName,
    ...         )
    ...     }
    ... )
"""

from collections.abc import Callable, Mapping
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from starlette.requests import Request

from schema_api.core.config import get_settings
from schema_api.core.types import (
    Auth,
    BodyType,
    DataType,
    HttpMethod,
    Logger,
    RequestParams,
    Throttle,
)


class ActionConfig(BaseModel):
    """One HTTP method on a resource.

    Attributes:
        search_params_schema: Model for the query string.
        headers_schema: Model for request headers.
        data_schema: Type the response data is validated against. Without it
            the client does not decode the response body.
        data_type: How the response body is decoded (``JSON`` or ``Text``).
        body_schema: Type the request body is validated against.
        body_type: How the request body is encoded (``JSON`` or
            ``URLSearchParams``).
        default_headers: Headers sent with every call of this action.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    search_params_schema: type[BaseModel] | None = None
    headers_schema: type[BaseModel] | None = None
    data_schema: Any = None
    data_type: DataType = "JSON"
    body_schema: Any = None
    body_type: BodyType = "JSON"
    default_headers: dict[str, str] = Field(default_factory=dict)


class ResourceConfig(BaseModel):
    """A path and the actions available on it."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Path template, e.g. /pokemon/{name}")
    actions: dict[HttpMethod, ActionConfig] = Field(default_factory=dict)
    url_params_schema: type[BaseModel] | None = None
    default_headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("actions", mode="before")
    @classmethod
    def lowercase_methods(cls, v: Any) -> Any:
        """Accept method names in any case."""
        if isinstance(v, Mapping):
            return {str(method).lower(): action for method, action in v.items()}
        return v


def resource(
    path: str,
    actions: Mapping[str, ActionConfig] | None = None,
    *,
    url_params_schema: type[BaseModel] | None = None,
    default_headers: Mapping[str, str] | None = None,
) -> ResourceConfig:
    """Shorthand for declaring a ``ResourceConfig``."""
    return ResourceConfig(
        path=path,
        actions=dict(actions or {}),
        url_params_schema=url_params_schema,
        default_headers=dict(default_headers or {}),
    )


class ApiConfig(BaseModel):
    """Resources keyed by name, shared by client and server."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    resources: dict[str, ResourceConfig] = Field(default_factory=dict)


class ClientConfig(ApiConfig):
    """Client-side configuration.

    Unset values fall back to ``Settings.client_config``.

    Attributes:
        base_url: Prepended to every resource path.
        fetcher: HTTP client used to send requests. The client creates and
            owns one when omitted.
        logger: Log sink, Loguru's ``logger`` when omitted.
        throttle: Pacing strategy awaited before each call.
        auth: Strategy producing authentication headers.
        request_params: Transport options applied to every call.
        default_headers: Headers sent with every call (lowest priority).
        retry_delays_ms: Backoff before each retry of a 429 or 500 response.
        timeout: Timeout in seconds for an owned fetcher.
        escape_params: Percent-encode URL and query values.
    """

    base_url: str | None = None
    fetcher: httpx.AsyncClient | None = None
    logger: Logger | None = None
    throttle: Throttle | None = None
    auth: Auth | None = None
    request_params: RequestParams = Field(default_factory=lambda: RequestParams())
    default_headers: dict[str, str] = Field(default_factory=dict)
    retry_delays_ms: tuple[int, ...] = ()
    timeout: float | None = None
    escape_params: bool = False

    @model_validator(mode="before")
    @classmethod
    def apply_settings_defaults(cls, data: Any) -> Any:
        """Fill unset options from the environment-driven settings."""
        if not isinstance(data, Mapping):
            return data

        defaults = get_settings().client_config
        data = dict(data)
        if not data.get("base_url"):
            data["base_url"] = defaults.base_url
        if data.get("default_headers") is None:
            data["default_headers"] = dict(defaults.default_headers)
        if data.get("retry_delays_ms") is None:
            data["retry_delays_ms"] = tuple(defaults.retry_delays_ms)
        if data.get("timeout") is None:
            data["timeout"] = defaults.timeout
        return data

    @field_validator("retry_delays_ms", mode="after")
    @classmethod
    def validate_retry_delays(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        """Reject negative backoff delays."""
        if any(delay < 0 for delay in v):
            msg = "Retry delays must be non-negative milliseconds"
            raise ValueError(msg)
        return v


type Middleware = Callable[[Request], Any]


class ServerConfig(ApiConfig):
    """Server-side configuration.

    Attributes:
        logger: Log sink, Loguru's ``logger`` when omitted.
        middleware: Called with each request before routing. Returning a
            response (directly or awaitably) short-circuits the request.
        cors_allow_origin: Access-Control-Allow-Origin value on every
            response, ``Settings.server_config.cors_allow_origin`` when unset.
    """

    logger: Logger | None = None
    middleware: Middleware | None = None
    cors_allow_origin: str | None = Field(default=None, validate_default=True)

    @field_validator("cors_allow_origin", mode="after")
    @classmethod
    def default_cors_origin(cls, v: str | None) -> str:
        """Fall back to the configured origin."""
        return v if v is not None else get_settings().server_config.cors_allow_origin
