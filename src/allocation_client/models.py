import io
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .cancellation import AbortSignal

# =============================================================================
# REQUEST MODELS
# =============================================================================
# Built fresh for every call and owned by that call only


class RequestOptions(BaseModel):
    """Transport-level overrides a caller may pass to any verb method."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    headers: dict[str, str] = Field(
        default_factory=dict, description="Extra headers, copied before use"
    )
    signal: AbortSignal | None = Field(
        None, description="Caller-owned abort signal, takes precedence over the timer"
    )
    timeout: float | None = Field(
        None, gt=0, description="Override of the configured timeout in seconds"
    )
    params: dict[str, Any] | None = Field(None, description="Query string parameters")


class MultipartForm(BaseModel):
    """Multipart body. The transport writes its own Content-Type boundary."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    fields: dict[str, Any] = Field(default_factory=dict)
    files: dict[str, Any] = Field(default_factory=dict)


class RequestDescriptor(BaseModel):
    """One outgoing request: endpoint, verb, body and overrides."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    endpoint: str
    method: str
    body: Any = None
    options: RequestOptions = Field(default_factory=RequestOptions)
    omit_json_content_type: bool = False

    @property
    def has_raw_body(self) -> bool:
        """True for binary, file-like and multipart bodies, sent as-is."""
        return is_raw_body(self.body)

    @property
    def sends_body(self) -> bool:
        return self.method not in ("GET", "DELETE") and self.body is not None


def is_raw_body(body: Any) -> bool:
    return isinstance(body, bytes | bytearray | memoryview | MultipartForm) or (
        isinstance(body, io.IOBase) or hasattr(body, "read")
    )
