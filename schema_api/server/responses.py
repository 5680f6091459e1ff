"""Response classes and helpers for the router.

Every helper sets ``Access-Control-Allow-Origin``; the router additionally
ensures it on responses returned by middleware.
"""

from typing import Any

import orjson
from pydantic import BaseModel
from pydantic_core import to_jsonable_python
from starlette.responses import JSONResponse, Response

from schema_api.core.constants import (
    CORS_ALLOW_ORIGIN_HEADER,
    HTTP_200_OK,
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_500_INTERNAL_SERVER_ERROR,
    TEXT_CONTENT_TYPE,
)

DEFAULT_ALLOW_ORIGIN = "*"


class ORJSONResponse(JSONResponse):
    """JSON response serialized with orjson.

    Pydantic models (at any depth) are dumped by alias; datetimes, UUIDs and
    decimals use their JSON forms.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json", by_alias=True)

        return orjson.dumps(content, default=to_jsonable_python)


def _cors(allow_origin: str, headers: dict[str, str] | None = None) -> dict[str, str]:
    return {**(headers or {}), CORS_ALLOW_ORIGIN_HEADER: allow_origin}


def text_response(
    body: str | None,
    status_code: int,
    *,
    allow_origin: str = DEFAULT_ALLOW_ORIGIN,
    headers: dict[str, str] | None = None,
) -> Response:
    """Plain response with an optional text body."""
    return Response(
        content=body or "",
        status_code=status_code,
        media_type=TEXT_CONTENT_TYPE if body else None,
        headers=_cors(allow_origin, headers),
    )


def json_response(
    data: Any,
    status_code: int = HTTP_200_OK,
    *,
    allow_origin: str = DEFAULT_ALLOW_ORIGIN,
    headers: dict[str, str] | None = None,
) -> Response:
    """JSON response for handler data."""
    return ORJSONResponse(
        content=data, status_code=status_code, headers=_cors(allow_origin, headers)
    )


def ok(data: Any = None, *, allow_origin: str = DEFAULT_ALLOW_ORIGIN) -> Response:
    return json_response(data, HTTP_200_OK, allow_origin=allow_origin)


def created(data: Any = None, *, allow_origin: str = DEFAULT_ALLOW_ORIGIN) -> Response:
    return json_response(data, HTTP_201_CREATED, allow_origin=allow_origin)


def bad_request(
    message: str | None = None, *, allow_origin: str = DEFAULT_ALLOW_ORIGIN
) -> Response:
    return text_response(message, HTTP_400_BAD_REQUEST, allow_origin=allow_origin)


def unauthorized(
    message: str | None = None, *, allow_origin: str = DEFAULT_ALLOW_ORIGIN
) -> Response:
    return text_response(message, HTTP_401_UNAUTHORIZED, allow_origin=allow_origin)


def forbidden(
    message: str | None = None, *, allow_origin: str = DEFAULT_ALLOW_ORIGIN
) -> Response:
    return text_response(message, HTTP_403_FORBIDDEN, allow_origin=allow_origin)


def not_found(
    message: str | None = None, *, allow_origin: str = DEFAULT_ALLOW_ORIGIN
) -> Response:
    return text_response(message, HTTP_404_NOT_FOUND, allow_origin=allow_origin)


def method_not_allowed(
    message: str | None = None, *, allow_origin: str = DEFAULT_ALLOW_ORIGIN
) -> Response:
    return text_response(message, HTTP_405_METHOD_NOT_ALLOWED, allow_origin=allow_origin)


def internal_server_error(
    message: str | None = None, *, allow_origin: str = DEFAULT_ALLOW_ORIGIN
) -> Response:
    return text_response(
        message, HTTP_500_INTERNAL_SERVER_ERROR, allow_origin=allow_origin
    )
