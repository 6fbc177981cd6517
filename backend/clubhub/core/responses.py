"""Error envelope models.

All error responses share the shape {"error": {"code", "message", "details"}}.
Success responses keep the plain shapes the editor front-end expects
(booleans, {"active": ...}, lists), so only errors are enveloped.
"""

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Error detail for response body.

    Attributes:
        code: Machine-readable error code (e.g., "ACCESS_DENIED").
        message: Human-readable error message.
        details: Optional list of field-level errors (for validation).
    """

    code: str
    message: str
    details: list[dict] | None = None


class ErrorResponse(BaseModel):
    """Standard error response envelope.

    Usage in exception handlers:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=ErrorDetail(code=exc.code, message=exc.message)
            ).model_dump(),
        )
    """

    error: ErrorDetail
