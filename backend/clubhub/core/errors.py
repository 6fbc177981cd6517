"""API error classes.

Every failure a handler can report is an APIError subclass carrying its
HTTP status and a machine-readable code. Exception handlers in
clubhub.main turn them into the standard error envelope.
"""


class APIError(Exception):
    """Base class for API errors.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Request data is malformed (400)."""

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class AccessDeniedError(APIError):
    """An authorization gate failed (403).

    Raised both when no identity was presented and when the presented
    identity or temporary key does not grant access to the site.
    """

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            code="ACCESS_DENIED",
            message=message,
            status_code=403,
        )


class NotFoundError(APIError):
    """Resource not found (404)."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        if resource_id:
            message = f"{resource} '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
        )


class ConflictError(APIError):
    """Site exists and cannot be reclaimed (400).

    The front-end treats any 400 from newsite as "url taken", so conflicts
    share the status of validation failures and differ only in code.
    """

    def __init__(
        self,
        message: str = "Site already exists",
        code: str = "SITE_EXISTS",
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=400,
        )


class UpstreamError(APIError):
    """A collaborator (database, identity provider) failed (500).

    The message stays generic; details go to the log only.
    """

    def __init__(self, message: str = "Upstream service failure") -> None:
        super().__init__(
            code="UPSTREAM_FAILURE",
            message=message,
            status_code=500,
        )
