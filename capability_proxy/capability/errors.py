from typing import Literal

from fastapi.responses import Response
from pydantic import BaseModel, Field

INVALID_KEY = "INVALID_KEY"
MISSING_KEY_MESSAGE = "Missing capability key"


class ErrorDetail(BaseModel):
    code: str = Field(
        description="Error code for programmatic handling", examples=[INVALID_KEY]
    )
    message: str = Field(
        description="Human-readable error message", examples=[MISSING_KEY_MESSAGE]
    )


class ErrorEnvelope(BaseModel):
    """The only JSON body this proxy builds itself; everything else is relayed."""

    ok: Literal[False] = False
    error: ErrorDetail


def build_error_envelope(code: str, message: str) -> bytes:
    """Serialize the envelope compactly, e.g. ``{"ok":false,"error":{...}}``."""
    envelope = ErrorEnvelope(error=ErrorDetail(code=code, message=message))
    return envelope.model_dump_json().encode("utf-8")


def build_error_response(status_code: int, code: str, message: str) -> Response:
    return Response(
        content=build_error_envelope(code, message),
        status_code=status_code,
        media_type="application/json",
    )


def invalid_key_response() -> Response:
    return build_error_response(400, INVALID_KEY, MISSING_KEY_MESSAGE)
