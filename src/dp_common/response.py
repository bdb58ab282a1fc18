"""Error response body.

Failures are rendered as:
{
    "error": {
        "kind": "VerificationError",
        "code": 4002,
        "message": "..."
    }
}

Successful payloads are returned as-is by the routers.
"""

from pydantic import BaseModel

from src.dp_common.errors import AppError


class ErrorBody(BaseModel):
    kind: str
    code: int
    message: str


class ErrorResponse(BaseModel):
    error: ErrorBody


def error_response(exc: AppError) -> ErrorResponse:
    return ErrorResponse(error=ErrorBody(kind=exc.kind, code=exc.code, message=exc.message))
