"""Construction of the typed context passed to route handlers."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl

import orjson
from starlette.requests import Request

from schema_api.core.exceptions import ParamsValidationError
from schema_api.core.schema import ValidationErr, coerce_against_schema, validate
from schema_api.core.types import JsonValue
from schema_api.resources.models import ActionConfig, ResourceConfig


@dataclass(frozen=True, slots=True)
class ActionHandlerContext:
    """Validated request parameters.

    Each group holds an instance of its declared schema, or None when the
    resource or action declares no schema for it.
    """

    url_params: Any = None
    search_params: Any = None
    headers: Any = None
    body: Any = None


async def read_body(request: Request) -> JsonValue:
    """Decode a request body as JSON, else as a form, else None.

    Bodies that are neither (including empty ones) yield None rather than an
    error; the body schema decides whether that is acceptable.
    """
    raw = await request.body()
    if not raw:
        return None

    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        pass

    try:
        return dict(parse_qsl(raw.decode(), keep_blank_values=True, strict_parsing=True))
    except ValueError:
        return None


def _coerce_group(group: str, schema: Any, value: dict[str, str]) -> Any:
    if schema is None:
        return None
    result = coerce_against_schema(value, schema)
    if isinstance(result, ValidationErr):
        raise ParamsValidationError(group, result.errors)
    return result.value


async def build_handler_context(
    request: Request,
    url_params: dict[str, str],
    resource: ResourceConfig,
    action: ActionConfig,
) -> ActionHandlerContext:
    """Validate the parts of a request against the declared schemas.

    URL params, search params and headers arrive as text and are coerced
    against their schemas; the decoded body is validated as-is. Header names
    are lower-cased.

    Args:
        request: The incoming request.
        url_params: Placeholder values captured by the path match.
        resource: Configuration of the matched resource.
        action: Configuration of the matched action.

    Returns:
        ActionHandlerContext: The validated parameter groups.

    Raises:
        ParamsValidationError: For the first group that fails validation.
    """
    body = None
    if action.body_schema is not None:
        result = validate(action.body_schema, await read_body(request))
        if isinstance(result, ValidationErr):
            raise ParamsValidationError("body", result.errors)
        body = result.value

    return ActionHandlerContext(
        url_params=_coerce_group("url_params", resource.url_params_schema, url_params),
        search_params=_coerce_group(
            "search_params", action.search_params_schema, dict(request.query_params)
        ),
        headers=_coerce_group(
            "headers",
            action.headers_schema,
            {name.lower(): value for name, value in request.headers.items()},
        ),
        body=body,
    )
