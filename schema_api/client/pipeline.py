"""Execution of a single client action call.

A call moves through a fixed sequence of steps:

1. validate and coerce the URL params, search params, headers and body
   against the schemas declared by the resource and the action
2. build the URL, the headers and the encoded body
3. wait for the throttle
4. send with the auth headers; after a 401 or 403, force-refresh them and
   resend once
5. retry 429 and 500 responses after each configured delay
6. decode and validate the response data

Operational failures never raise; they are reported through ``ApiResponse``
with the 600 and 601 sentinel statuses. ``InvalidTokenSchemaError`` is the
one exception that propagates, since it indicates a broken integration.
"""

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final

import httpx
import orjson
from loguru import logger as default_logger

from schema_api.client.auth import resolve_auth_headers
from schema_api.client.response import ApiResponse
from schema_api.core.constants import (
    AUTHENTICATION_ERROR_STATUS_CODES,
    MILLISECONDS_PER_SECOND,
    RETRYABLE_STATUS_CODES,
    ApiStatusCode,
)
from schema_api.core.error_context import sanitize_headers
from schema_api.core.exceptions import InvalidTokenSchemaError, ParamsValidationError
from schema_api.core.schema import (
    ValidationErr,
    coerce_against_schema,
    dump_params,
    validate,
)
from schema_api.core.types import Auth, HeaderMap, Logger, ParamsInput, RequestParams
from schema_api.params.request import (
    build_body,
    build_url,
    content_type_header,
    dump_body,
    merge_headers,
)
from schema_api.resources.compiler import CompiledResource
from schema_api.resources.models import ActionConfig, ClientConfig

PARAMS_VALIDATION_FAILED: Final[str] = "Request parameters failed validation"
UNCAUGHT_CLIENT_ERROR: Final[str] = "Unhandled client-side error"
DATA_PARSE_FAILED: Final[str] = "Data not parsed successfully"


@dataclass(frozen=True, slots=True)
class ActionParams:
    """Parameters supplied to one action call."""

    url_params: ParamsInput | None = None
    search_params: ParamsInput | None = None
    headers: ParamsInput | None = None
    body: Any = None
    request_params: RequestParams | None = None


@dataclass(frozen=True, slots=True)
class ParsedParams:
    """Validated parameters in their wire form."""

    url_params: dict[str, Any]
    search_params: dict[str, Any] | None
    headers: dict[str, Any] | None
    body: Any


def _parse_group(group: str, schema: Any, value: ParamsInput | None) -> dict[str, Any] | None:
    """Validate one textual parameter group, None when no schema is declared."""
    if schema is None:
        return None
    result = coerce_against_schema(value if value is not None else {}, schema)
    if isinstance(result, ValidationErr):
        raise ParamsValidationError(group, result.errors)
    return dump_params(result.value)


def _passthrough_headers(value: ParamsInput | None) -> dict[str, Any] | None:
    if value is None:
        return None
    return dump_params(value)


def parse_params(
    resource: CompiledResource, action: ActionConfig, params: ActionParams
) -> ParsedParams:
    """Validate every parameter group of a call.

    Groups without a declared schema are dropped, except per-call headers
    which are always forwarded.

    Raises:
        ParamsValidationError: For the first group that fails validation.
    """
    url_params = _parse_group(
        "url_params", resource.config.url_params_schema, params.url_params
    )
    search_params = _parse_group(
        "search_params", action.search_params_schema, params.search_params
    )
    headers = _parse_group("headers", action.headers_schema, params.headers)

    body = None
    if action.body_schema is not None:
        result = validate(
            action.body_schema, params.body if params.body is not None else {}
        )
        if isinstance(result, ValidationErr):
            raise ParamsValidationError("body", result.errors)
        body = dump_body(result.value)

    return ParsedParams(
        url_params=url_params or {},
        search_params=search_params,
        headers=headers,
        body=body,
    )


class RequestPipeline:
    """Sends the calls of one client, sharing its configuration and transport."""

    def __init__(self, config: ClientConfig, fetcher: httpx.AsyncClient) -> None:
        self.config = config
        self.fetcher = fetcher
        self.logger: Logger = config.logger or default_logger
        self.base_url = config.base_url or ""
        self.retry_delays_ms: Sequence[int] = config.retry_delays_ms

    @property
    def auth(self) -> Auth | None:
        return self.config.auth

    async def execute(
        self,
        method: str,
        resource: CompiledResource,
        action: ActionConfig,
        params: ActionParams,
    ) -> ApiResponse[Any]:
        """Run one call and classify its outcome.

        Raises:
            InvalidTokenSchemaError: If the auth strategy fetched a malformed
                token.
        """
        label = f"[{method.upper()}] {resource.name}"
        try:
            parsed = parse_params(resource, action, params)

            url = build_url(
                self.base_url,
                resource.template,
                parsed.url_params,
                parsed.search_params,
                escape=self.config.escape_params,
            )
            label = f"[{method.upper()}] {url}"

            call_options: RequestParams = params.request_params or {}
            headers = merge_headers(
                content_type_header(action.body_type)
                if action.body_schema is not None
                else None,
                self.config.default_headers,
                self.config.request_params.get("headers"),
                resource.config.default_headers,
                action.default_headers,
                parsed.headers,
                _passthrough_headers(params.headers)
                if action.headers_schema is None
                else None,
            )
            content = build_body(parsed.body, action.body_type)
            transport_options = self._transport_options(call_options)

            if self.config.throttle is not None:
                await self.config.throttle.throttle()

            response = await self._send_with_retries(
                method,
                url,
                headers,
                call_options.get("headers"),
                content,
                transport_options,
            )
            return self._decode(label, action, response)

        except InvalidTokenSchemaError:
            raise
        except ParamsValidationError as exc:
            self.logger.debug(f"{label} {PARAMS_VALIDATION_FAILED}: {exc.group}")
            return ApiResponse.failure(
                ApiStatusCode.UNCAUGHT_CLIENT_ERROR, PARAMS_VALIDATION_FAILED, exc
            )
        except Exception as exc:
            self.logger.error(f"{label} {UNCAUGHT_CLIENT_ERROR}: {exc!r}")
            return ApiResponse.failure(
                ApiStatusCode.UNCAUGHT_CLIENT_ERROR, UNCAUGHT_CLIENT_ERROR, exc
            )

    def _transport_options(self, call_options: RequestParams) -> dict[str, Any]:
        options: dict[str, Any] = {}
        for source in (self.config.request_params, call_options):
            options.update(
                {key: value for key, value in source.items() if key != "headers"}
            )
        return options

    async def _send_with_retries(
        self,
        method: str,
        url: str,
        headers: HeaderMap,
        override_headers: Mapping[str, str] | None,
        content: str | None,
        transport_options: Mapping[str, Any],
    ) -> httpx.Response:
        async def send(auth_headers: HeaderMap) -> httpx.Response:
            outgoing = merge_headers(headers, auth_headers, override_headers)
            self.logger.debug(
                f"[{method.upper()}] {url} headers={sanitize_headers(outgoing)}"
            )
            response = await self.fetcher.request(
                method.upper(), url, headers=outgoing, content=content, **transport_options
            )
            self.logger.debug(
                f"[{method.upper()}] {response.status_code} {response.reason_phrase} {url}"
            )
            return response

        auth_headers = await resolve_auth_headers(self.auth)
        response = await send(auth_headers)

        if self.auth is not None and response.status_code in AUTHENTICATION_ERROR_STATUS_CODES:
            auth_headers = await resolve_auth_headers(self.auth, force_refresh=True)
            response = await send(auth_headers)

        for delay_ms in self.retry_delays_ms:
            if response.status_code not in RETRYABLE_STATUS_CODES:
                break
            self.logger.debug(
                f"[{method.upper()}] {url} returned {response.status_code}, "
                f"retrying in {delay_ms} ms"
            )
            await asyncio.sleep(delay_ms / MILLISECONDS_PER_SECOND)
            response = await send(auth_headers)

        return response

    def _decode(
        self, label: str, action: ActionConfig, response: httpx.Response
    ) -> ApiResponse[Any]:
        if not response.is_success:
            return ApiResponse.failure(response.status_code, response.reason_phrase)

        if action.data_schema is None:
            return ApiResponse.success(response.status_code, response.reason_phrase)

        try:
            raw = (
                response.text
                if action.data_type == "Text"
                else orjson.loads(response.content)
            )
        except orjson.JSONDecodeError as exc:
            self.logger.error(f"{label} {DATA_PARSE_FAILED}: {exc}")
            return ApiResponse.failure(ApiStatusCode.DATA_PARSE_ERROR, DATA_PARSE_FAILED, exc)

        result = validate(action.data_schema, raw)
        if isinstance(result, ValidationErr):
            self.logger.error(f"{label} {DATA_PARSE_FAILED}: {result.errors}")
            return ApiResponse.failure(
                ApiStatusCode.DATA_PARSE_ERROR, DATA_PARSE_FAILED, result.errors
            )

        return ApiResponse.success(response.status_code, response.reason_phrase, result.value)
