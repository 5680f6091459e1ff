"""Client objects mirroring the resources and actions of a configuration.

Example:
    >>> async with client(config) as api:
    ...     response = await api.pokemon.get(url_params={"name": "pikachu"})
    ...     if response.ok:
    ...         print(response.data.name)
"""

from collections.abc import Iterator
from types import TracebackType
from typing import Any, Self

import httpx
from loguru import logger

from schema_api.client.pipeline import ActionParams, RequestPipeline
from schema_api.client.response import ApiResponse
from schema_api.core.exceptions import ConfigurationError
from schema_api.core.types import ParamsInput, RequestParams
from schema_api.resources.compiler import CompiledResource, compile_config
from schema_api.resources.models import ActionConfig, ClientConfig


class ClientAction:
    """A callable bound to one resource and HTTP method."""

    def __init__(
        self,
        method: str,
        resource: CompiledResource,
        action: ActionConfig,
        pipeline: RequestPipeline,
    ) -> None:
        self.method = method
        self.resource = resource
        self.action = action
        self._pipeline = pipeline

    async def __call__(
        self,
        *,
        url_params: ParamsInput | None = None,
        search_params: ParamsInput | None = None,
        headers: ParamsInput | None = None,
        body: Any = None,
        request_params: RequestParams | None = None,
    ) -> ApiResponse[Any]:
        """Send the request and return its envelope.

        Args:
            url_params: Values for the path placeholders.
            search_params: Query string values.
            headers: Request headers.
            body: Request body.
            request_params: Per-call transport options; their ``headers``
                override every other header source.

        Returns:
            ApiResponse: The classified outcome of the call.

        Raises:
            InvalidTokenSchemaError: If the auth strategy fetched a malformed
                token.
        """
        params = ActionParams(
            url_params=url_params,
            search_params=search_params,
            headers=headers,
            body=body,
            request_params=request_params,
        )
        return await self._pipeline.execute(self.method, self.resource, self.action, params)

    def __repr__(self) -> str:
        return f"ClientAction({self.method.upper()} {self.resource.template.canonical})"


class ClientResource:
    """Actions of one resource, available as attributes or by method name."""

    def __init__(self, name: str, actions: dict[str, ClientAction]) -> None:
        self.name = name
        self._actions = actions

    def __getattr__(self, method: str) -> ClientAction:
        actions = self.__dict__.get("_actions", {})
        if method in actions:
            return actions[method]
        msg = f"Resource '{self.__dict__.get('name')}' has no '{method}' action"
        raise AttributeError(msg)

    def __getitem__(self, method: str) -> ClientAction:
        return self._actions[method.lower()]

    def __contains__(self, method: object) -> bool:
        return isinstance(method, str) and method.lower() in self._actions

    def __iter__(self) -> Iterator[str]:
        return iter(self._actions)


class ApiClient:
    """Client for an API described by a ``ClientConfig``.

    Use as an async context manager, or call ``aclose`` when done. Only an
    HTTP client created here is closed; an injected ``fetcher`` stays open.

    Raises:
        ConfigurationError: If the configuration does not compile or has no
            base URL.
    """

    def __init__(self, config: ClientConfig) -> None:
        if not config.base_url:
            msg = "A base URL is required (config or SCHEMA_API_CLIENT_CONFIG__BASE_URL)"
            raise ConfigurationError(msg)

        self.config = config
        self.compiled = compile_config(config)
        self._owns_fetcher = config.fetcher is None
        self.fetcher = config.fetcher or httpx.AsyncClient(timeout=config.timeout)
        self.pipeline = RequestPipeline(config, self.fetcher)

        self._resources = {
            name: ClientResource(
                name,
                {
                    method: ClientAction(method, compiled, action, self.pipeline)
                    for method, action in compiled.config.actions.items()
                },
            )
            for name, compiled in self.compiled.resources.items()
        }

        logger.debug(
            "Client ready for {} with {} resources", config.base_url, len(self._resources)
        )

    @property
    def resources(self) -> dict[str, ClientResource]:
        return dict(self._resources)

    def __getattr__(self, name: str) -> ClientResource:
        resources = self.__dict__.get("_resources", {})
        if name in resources:
            return resources[name]
        msg = f"Unknown resource '{name}'"
        raise AttributeError(msg)

    def __getitem__(self, name: str) -> ClientResource:
        return self._resources[name]

    def __contains__(self, name: object) -> bool:
        return name in self._resources

    async def aclose(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_fetcher:
            await self.fetcher.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()


def client(config: ClientConfig | None = None, /, **options: Any) -> ApiClient:
    """Create an ``ApiClient`` from a ``ClientConfig`` or keyword options.

    Example:
        >>> api = client(base_url="https://pokeapi.co/api/v2", resources={...})
    """
    if config is None:
        config = ClientConfig(**options)
    elif options:
        config = config.model_copy(update=options)
    return ApiClient(config)
