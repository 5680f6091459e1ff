"""Handler results.

Handlers return ``HandlerOk`` or ``HandlerError``. A mapping with the same
fields (``{"ok": True, "data": ...}``) is accepted too.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from schema_api.core.constants import HTTP_200_OK


class HandlerOk(BaseModel):
    """Successful handler outcome, serialized per the action's ``data_type``."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ok: Literal[True] = True
    data: Any = None
    status: int = Field(default=HTTP_200_OK, ge=100, le=599)

    def __init__(self, data: Any = None, status: int = HTTP_200_OK, **extra: Any) -> None:
        super().__init__(data=data, status=status, **extra)


class HandlerError(BaseModel):
    """Failed handler outcome. ``message`` is sent as the raw body."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    status: int = Field(ge=100, le=599)
    message: str | None = None

    def __init__(self, status: int, message: str | None = None, **extra: Any) -> None:
        super().__init__(status=status, message=message, **extra)


type HandlerResult = HandlerOk | HandlerError

_result_adapter: TypeAdapter[HandlerResult] = TypeAdapter(HandlerResult)


def to_handler_result(value: Any) -> HandlerResult:
    """Normalize a handler's return value.

    Raises:
        pydantic.ValidationError: If the value is neither result shape.
    """
    if isinstance(value, HandlerOk | HandlerError):
        return value
    return _result_adapter.validate_python(value)
