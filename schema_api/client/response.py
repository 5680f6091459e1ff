"""The envelope returned by every client action."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Outcome of a client call.

    Actions never raise for HTTP or decoding failures; they return an envelope
    instead. ``ok`` is True only for a 2xx response whose body (when a data
    schema is declared) decoded and validated. Client-side failures use the
    sentinel statuses 600 (request not built or sent) and 601 (response data
    not parsed).
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    status: int
    status_text: str = ""
    data: DataT | None = None
    error: Any = Field(default=None, description="Cause of a client-side failure")

    @classmethod
    def success(cls, status: int, status_text: str, data: Any = None) -> "ApiResponse[Any]":
        """Build a successful envelope."""
        return cls(ok=True, status=status, status_text=status_text, data=data)

    @classmethod
    def failure(
        cls, status: int, status_text: str = "", error: Any = None
    ) -> "ApiResponse[Any]":
        """Build a failed envelope."""
        return cls(ok=False, status=status, status_text=status_text, error=error)
