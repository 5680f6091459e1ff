"""Wire assembly for outgoing requests: URL, headers and body."""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, urlencode

import orjson
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from schema_api.core.constants import (
    CONTENT_TYPE_HEADER,
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
)
from schema_api.core.schema import stringify_param
from schema_api.core.types import BodyType, HeaderMap
from schema_api.params.paths import PathTemplate


def build_url(
    base_url: str,
    template: PathTemplate,
    url_params: Mapping[str, Any] | None = None,
    search_params: Mapping[str, Any] | None = None,
    *,
    escape: bool = False,
) -> str:
    """Build the request URL from a base URL, a path template and parameters.

    Values are not percent-encoded unless ``escape`` is set.

    Args:
        base_url: Base URL, a single trailing slash is ignored.
        template: Parsed resource path.
        url_params: Values for the path placeholders.
        search_params: Query string entries, appended in order.
        escape: Percent-encode path and query values.

    Returns:
        str: The complete URL.
    """
    url = base_url.removesuffix("/") + template.build(url_params or {}, escape=escape)

    if search_params:
        entries = []
        for key, value in search_params.items():
            text = stringify_param(value)
            if escape:
                key, text = quote(str(key), safe=""), quote(text, safe="")
            entries.append(f"{key}={text}")
        url += "?" + "&".join(entries)

    return url


def merge_headers(*sources: Mapping[str, Any] | None) -> HeaderMap:
    """Merge header sources, later sources overriding earlier ones.

    Header names compare case-insensitively; the spelling of the winning
    source is kept. Values are stringified.
    """
    merged: dict[str, tuple[str, str]] = {}
    for source in sources:
        if not source:
            continue
        for name, value in source.items():
            merged[name.lower()] = (name, stringify_param(value))
    return dict(merged.values())


def content_type_for(body_type: BodyType) -> str:
    """Return the Content-Type matching a body type."""
    return JSON_CONTENT_TYPE if body_type == "JSON" else FORM_CONTENT_TYPE


def content_type_header(body_type: BodyType) -> HeaderMap:
    """Return the Content-Type header for a body type."""
    return {CONTENT_TYPE_HEADER: content_type_for(body_type)}


def dump_body(value: Any) -> Any:
    """Dump a validated body to JSON-compatible values."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return to_jsonable_python(value)


def build_body(body_params: Any, body_type: BodyType) -> str | None:
    """Serialize body parameters for the wire.

    Args:
        body_params: JSON-compatible body values, or None for no body.
        body_type: ``JSON`` for a JSON document, ``URLSearchParams`` for a
            form-encoded body with every value string-coerced.

    Returns:
        str | None: The encoded body, or None when there is no body.
    """
    if body_params is None:
        return None

    if body_type == "JSON":
        return orjson.dumps(body_params).decode()

    return urlencode(
        [
            (str(key), stringify_param(value))
            for key, value in dict(body_params).items()
            if value is not None
        ]
    )
