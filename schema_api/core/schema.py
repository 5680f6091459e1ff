"""Schema validation and string coercion on top of pydantic.

Schemas are plain pydantic types. Parameter groups (URL params, search
params, headers) and bodies are declared as ``BaseModel`` subclasses; response
data may be any type a ``TypeAdapter`` accepts.

URL, query and header transport is always textual, so parameter groups are
validated with ``coerce_against_schema``, which hands fully textual mappings
to pydantic's string validation (``TypeAdapter.validate_strings``). ``"42"``
for an ``int`` field therefore becomes ``42``, ``"off"`` for a ``bool`` field
becomes ``False``, and dates, UUIDs, enums and literals parse from their
string forms.

Nothing in this module raises on invalid input. Results are ``ValidationOk``
or ``ValidationErr``.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from schema_api.core.types import Schema


@dataclass(frozen=True, slots=True)
class ValidationOk[T]:
    """Successful validation carrying the validated (and coerced) value."""

    value: T


@dataclass(frozen=True, slots=True)
class ValidationErr:
    """Failed validation carrying pydantic's structured error list."""

    errors: list[dict[str, Any]]


type ValidationResult[T] = ValidationOk[T] | ValidationErr


@lru_cache(maxsize=512)
def _cached_adapter(schema: Schema) -> TypeAdapter[Any]:
    return TypeAdapter(schema)


def get_adapter(schema: Schema) -> TypeAdapter[Any]:
    """Return a (cached where possible) TypeAdapter for ``schema``."""
    try:
        return _cached_adapter(schema)
    except TypeError:
        # Unhashable annotations cannot be cached
        return TypeAdapter(schema)


def is_model_schema(schema: Schema) -> bool:
    """Whether ``schema`` is a pydantic model class."""
    return isinstance(schema, type) and issubclass(schema, BaseModel)


def validate(schema: Schema, value: Any, *, strict: bool = False) -> ValidationResult[Any]:
    """Validate ``value`` against ``schema``.

    Args:
        schema: Any type pydantic can build a TypeAdapter for.
        value: Raw input value.
        strict: Disable pydantic's lax conversions.

    Returns:
        ValidationResult: The validated value or the structured errors.
    """
    try:
        return ValidationOk(get_adapter(schema).validate_python(value, strict=strict))
    except PydanticValidationError as exc:
        return ValidationErr(exc.errors(include_url=False))


def validate_text(schema: Schema, value: Mapping[str, str]) -> ValidationResult[Any]:
    """Validate a mapping of strings, parsing each into its declared type."""
    try:
        return ValidationOk(get_adapter(schema).validate_strings(dict(value)))
    except PydanticValidationError as exc:
        return ValidationErr(exc.errors(include_url=False))


def coerce_against_schema(value: Any, schema: Schema) -> ValidationResult[Any]:
    """Validate a parameter group arriving as text.

    Instances of the schema are validated strictly. Mappings whose values are
    all strings go through pydantic's string validation; mappings mixing
    typed values (``{"limit": 5, "offset": "10"}``) are validated in lax mode.

    Args:
        value: Mapping of raw parameters (or an instance of the schema).
        schema: Pydantic model declaring the parameter group.

    Returns:
        ValidationResult: The validated model or the structured errors.
    """
    if not isinstance(value, Mapping):
        return validate(schema, value, strict=True)
    if all(isinstance(item, str) for item in value.values()):
        return validate_text(schema, value)
    return validate(schema, value)


def schema_keys(schema: Schema) -> frozenset[str]:
    """Return the wire keys (alias, else field name) declared by a model schema.

    Raises:
        TypeError: If ``schema`` is not a pydantic model class.
    """
    if not is_model_schema(schema):
        msg = f"Expected a pydantic model class, got {schema!r}"
        raise TypeError(msg)
    return frozenset(field.alias or name for name, field in schema.model_fields.items())


def dump_params(value: Any) -> dict[str, Any]:
    """Dump a validated parameter group to JSON-compatible wire values."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return {key: item for key, item in dict(value).items() if item is not None}


def stringify_param(value: Any) -> str:
    """Render a parameter value as text (booleans as ``true``/``false``)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
