"""ASGI router serving an API configuration.

For each request the router:

1. runs the optional middleware, returning its response if it gives one
2. matches the path against the resources in route order (404 on no match)
3. picks the handler for the method (405 when the path matched but the
   method has no handler)
4. builds the handler context (400 when a parameter group is invalid)
5. calls the handler and shapes its result into a response

Paths are matched below the ASGI ``root_path``, so the router can be mounted
under a prefix. Lifespan events are answered by a starlette ``Router``.

Any exception becomes a 500; the router never raises into the server. Every
response carries ``Access-Control-Allow-Origin`` and ``X-Correlation-ID``.

Example:
    >>> router = ApiRouter(config, {"pokemon": {"get": get_pokemon}})
    >>> serve(router, port=8080)
"""

import inspect
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import uvicorn
from loguru import logger as default_logger
from starlette._utils import get_route_path
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Router
from starlette.types import Receive, Scope, Send

from schema_api.core.config import get_settings
from schema_api.core.constants import CORS_ALLOW_ORIGIN_HEADER, CORRELATION_ID_HEADER
from schema_api.core.context import correlation_id_from, correlation_scope
from schema_api.core.exceptions import ConfigurationError, ParamsValidationError
from schema_api.core.logging import setup_logging
from schema_api.core.types import Logger
from schema_api.resources.compiler import CompiledResource, compile_config
from schema_api.resources.models import ActionConfig, ServerConfig
from schema_api.server.context import ActionHandlerContext, build_handler_context
from schema_api.server.responses import (
    bad_request,
    internal_server_error,
    json_response,
    method_not_allowed,
    not_found,
    text_response,
)
from schema_api.server.results import HandlerOk, HandlerResult, to_handler_result

type ActionHandler = Callable[
    [Request, ActionHandlerContext], HandlerResult | Awaitable[HandlerResult] | Any
]
type HandlerMap = Mapping[str, Mapping[str, ActionHandler]]


@dataclass(frozen=True, slots=True)
class Route:
    """A compiled resource with the handlers registered for it."""

    resource: CompiledResource
    handlers: dict[str, ActionHandler]


class ApiRouter:
    """Route requests to handlers keyed by resource name and method.

    Args:
        config: Server configuration.
        handlers: ``{resource_name: {method: handler}}``. A handler receives
            the request and its ``ActionHandlerContext`` and returns (or
            awaits to) a ``HandlerOk`` or ``HandlerError``.

    Raises:
        ConfigurationError: If the configuration does not compile, or a
            handler names an unknown resource or a method without an action.
    """

    def __init__(self, config: ServerConfig, handlers: HandlerMap) -> None:
        self.config = config
        self.compiled = compile_config(config)
        self.logger: Logger = config.logger or default_logger
        self.allow_origin: str = config.cors_allow_origin or "*"
        self.routes = self._build_routes(handlers)
        self._app = Router(redirect_slashes=False, default=self._endpoint)

    def _build_routes(self, handlers: HandlerMap) -> tuple[Route, ...]:
        by_resource: dict[str, dict[str, ActionHandler]] = {}
        for name, methods in handlers.items():
            compiled = self.compiled.resources.get(name)
            if compiled is None:
                msg = f"Handler registered for unknown resource '{name}'"
                raise ConfigurationError(msg, context={"resource": name})
            for method, handler in methods.items():
                if compiled.action(method) is None:
                    msg = f"Resource '{name}' has no '{method}' action to handle"
                    raise ConfigurationError(
                        msg, context={"resource": name, "method": method}
                    )
                by_resource.setdefault(name, {})[method.lower()] = handler

        return tuple(
            Route(resource=compiled, handlers=by_resource.get(compiled.name, {}))
            for compiled in self.compiled.routes
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self._app(scope, receive, send)

    async def _endpoint(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        response = await self.handle(Request(scope, receive))
        await response(scope, receive, send)

    async def handle(self, request: Request) -> Response:
        """Produce the response for a request. Never raises."""
        correlation_id = correlation_id_from(request.headers)
        path = get_route_path(request.scope)

        with (
            correlation_scope(correlation_id),
            default_logger.contextualize(correlation_id=correlation_id),
        ):
            try:
                response = await self._dispatch(request, path)
                response.headers.setdefault(CORS_ALLOW_ORIGIN_HEADER, self.allow_origin)
            except Exception:
                self.logger.exception(
                    f"[{request.method}] {path} raised an unhandled exception"
                )
                response = internal_server_error(allow_origin=self.allow_origin)

            response.headers[CORRELATION_ID_HEADER] = correlation_id
            self.logger.debug(f"[{request.method}] {response.status_code} {path}")
            return response

    async def _dispatch(self, request: Request, path: str) -> Response:
        if self.config.middleware is not None:
            early = self.config.middleware(request)
            if inspect.isawaitable(early):
                early = await early
            if early is not None:
                if not isinstance(early, Response):
                    msg = (
                        "Middleware must return a starlette Response or None, "
                        f"got {type(early).__name__}"
                    )
                    raise TypeError(msg)
                self.logger.debug(f"[{request.method}] {path} answered by middleware")
                return early

        method = request.method.lower()

        for route in self.routes:
            url_params = route.resource.template.match(path)
            if url_params is None:
                continue

            handler = route.handlers.get(method)
            action = route.resource.action(method)
            if handler is None or action is None:
                return method_not_allowed(allow_origin=self.allow_origin)

            try:
                context = await build_handler_context(
                    request, url_params, route.resource.config, action
                )
            except ParamsValidationError as exc:
                self.logger.debug(
                    f"[{request.method}] {path} invalid {exc.group}: {exc.errors}"
                )
                return bad_request(allow_origin=self.allow_origin)

            result = handler(request, context)
            if inspect.isawaitable(result):
                result = await result
            return self._shape(to_handler_result(result), action)

        return not_found(allow_origin=self.allow_origin)

    def _shape(self, result: HandlerResult, action: ActionConfig) -> Response:
        if isinstance(result, HandlerOk):
            # No data means no body for either data type
            if result.data is None:
                return text_response(None, result.status, allow_origin=self.allow_origin)
            if action.data_type == "Text":
                return text_response(
                    str(result.data), result.status, allow_origin=self.allow_origin
                )
            return json_response(result.data, result.status, allow_origin=self.allow_origin)
        return text_response(result.message, result.status, allow_origin=self.allow_origin)


def uvicorn_log_config() -> dict[str, Any]:
    """Uvicorn logging config that forwards its loggers to Loguru."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {
            "default": {
                "class": "schema_api.core.logging.InterceptHandler",
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
            "uvicorn.error": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False,
            },
            "uvicorn.access": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False,
            },
        },
    }


def serve(router: ApiRouter, host: str | None = None, port: int | None = None) -> None:
    """Run a router under uvicorn until interrupted.

    Host and port default to ``Settings.server_config``.
    """
    settings = get_settings()
    setup_logging(settings)

    host = host or settings.server_config.host
    port = port if port is not None else settings.server_config.port

    default_logger.info(f"Starting Uvicorn on http://{host}:{port}")
    uvicorn.run(router, host=host, port=port, log_config=uvicorn_log_config())
