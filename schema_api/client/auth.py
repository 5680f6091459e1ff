"""Authentication strategies.

Each strategy implements ``produce_auth_headers(force_refresh=False)``. The
client calls it before the first send of every request and once more with
``force_refresh=True`` after a 401 or 403 response.

Example:
    >>> api = client(
    ...     base_url="https://api.example.com",
    ...     auth=ApiKeyAuth("secret-key", app_id="my-app"),
    ...     resources={...},
    ... )
"""

import base64
import inspect
from collections.abc import Callable
from typing import Any

import httpx
import orjson
from loguru import logger

from schema_api.core.constants import AUTHORIZATION_HEADER, RETRYABLE_STATUS_CODES
from schema_api.core.exceptions import InvalidTokenSchemaError
from schema_api.core.schema import ValidationErr, validate
from schema_api.core.types import Auth, HeaderMap, RequestParams, Schema


def basic_credentials(client_id: str, client_secret: str) -> str:
    """Return the ``Basic`` Authorization header value for a credential pair."""
    token = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()
    return f"Basic {token}"


async def resolve_auth_headers(auth: Auth | None, *, force_refresh: bool = False) -> HeaderMap:
    """Ask a strategy for its headers, awaiting them when necessary."""
    if auth is None:
        return {}
    headers = auth.produce_auth_headers(force_refresh)
    if inspect.isawaitable(headers):
        headers = await headers
    return dict(headers or {})


class ApiKeyAuth:
    """Static API key, optionally paired with an application id."""

    def __init__(
        self,
        key: str,
        key_header: str = "x-api-key",
        app_id: str | None = None,
        app_id_header: str = "x-app-id",
    ) -> None:
        self.key = key
        self.key_header = key_header
        self.app_id = app_id
        self.app_id_header = app_id_header

    def produce_auth_headers(self, force_refresh: bool = False) -> HeaderMap:
        headers = {self.key_header: self.key}
        if self.app_id:
            headers[self.app_id_header] = self.app_id
        return headers


class BasicAuth:
    """HTTP basic authentication."""

    def __init__(self, client_id: str, client_secret: str) -> None:
        self._credentials = basic_credentials(client_id, client_secret)

    def produce_auth_headers(self, force_refresh: bool = False) -> HeaderMap:
        return {AUTHORIZATION_HEADER: self._credentials}


class BearerTokenAuth[T]:
    """Bearer token fetched from a token endpoint and cached.

    The token is requested with a ``POST`` using ``httpx.BasicAuth`` and is
    refetched when none is cached, when a refresh is forced, or when
    ``is_token_valid`` reports the cached token as no longer valid. Concurrent
    callers that find the token stale may each refetch it.

    Args:
        schema: Type the token payload is validated against.
        token_url: Token endpoint.
        client_id: Basic auth user for the token endpoint.
        client_secret: Basic auth password for the token endpoint.
        mapper: Extracts the bearer string from a validated token.
        request_params: Transport options for the token request.
        is_token_valid: Predicate deciding whether a cached token is reusable.
        fetcher: HTTP client for the token request; a short-lived one is used
            when omitted.
        max_attempts: Attempts on 429 and 500 responses before giving up.

    Raises:
        InvalidTokenSchemaError: From ``produce_auth_headers`` when the token
            endpoint answers with a payload that is not valid JSON or does not
            match ``schema``.
    """

    def __init__(
        self,
        schema: Schema,
        *,
        token_url: str,
        client_id: str,
        client_secret: str,
        mapper: Callable[[T], str],
        request_params: RequestParams | None = None,
        is_token_valid: Callable[[T], bool] | None = None,
        fetcher: httpx.AsyncClient | None = None,
        max_attempts: int = 3,
    ) -> None:
        self.schema = schema
        self.token_url = token_url
        self.mapper = mapper
        self.request_params: RequestParams = request_params or {}
        self.is_token_valid = is_token_valid
        self.fetcher = fetcher
        self.max_attempts = max_attempts
        self._basic_auth = httpx.BasicAuth(client_id, client_secret)
        self._token: T | None = None

    @property
    def token(self) -> T | None:
        """The cached token, if any."""
        return self._token

    def _is_stale(self, token: T | None, force_refresh: bool) -> bool:
        if token is None or force_refresh:
            return True
        return self.is_token_valid is not None and not self.is_token_valid(token)

    async def produce_auth_headers(self, force_refresh: bool = False) -> HeaderMap:
        token = self._token
        if self._is_stale(token, force_refresh):
            token = await self._fetch_token()
            if token is None:
                return {}
        return {AUTHORIZATION_HEADER: f"Bearer {self.mapper(token)}"}

    async def _post(self) -> httpx.Response:
        options: dict[str, Any] = {
            key: value for key, value in self.request_params.items() if key != "headers"
        }
        headers = self.request_params.get("headers")
        if self.fetcher is not None:
            return await self.fetcher.post(
                self.token_url, headers=headers, auth=self._basic_auth, **options
            )
        async with httpx.AsyncClient() as fetcher:
            return await fetcher.post(
                self.token_url, headers=headers, auth=self._basic_auth, **options
            )

    async def _fetch_token(self) -> T | None:
        for attempt in range(1, self.max_attempts + 1):
            response = await self._post()
            if response.is_success:
                break
            if response.status_code not in RETRYABLE_STATUS_CODES:
                logger.warning(
                    "Token request failed with status {}", response.status_code
                )
                return None
            logger.debug(
                "Token request returned {} (attempt {}/{})",
                response.status_code,
                attempt,
                self.max_attempts,
            )
        else:
            logger.warning("Token request gave up after {} attempts", self.max_attempts)
            return None

        try:
            payload = orjson.loads(response.content)
        except orjson.JSONDecodeError as exc:
            raise InvalidTokenSchemaError(cause=exc) from exc

        result = validate(self.schema, payload)
        if isinstance(result, ValidationErr):
            raise InvalidTokenSchemaError(context={"errors": result.errors})

        self._token = result.value
        return result.value
