"""Application error taxonomy mapped to HTTP status codes by the exception handlers in main."""


class CleanTaskError(Exception):
    """Base class for errors that are reported to the client as-is."""

    status_code = 500
    category = "internal"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.category


class ValidationError(CleanTaskError):
    """Malformed or rejected input. Message names the offending field."""

    status_code = 400
    category = "validation_error"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: list[str] | None = None,
    ) -> None:
        super().__init__(message, code)
        self.details = details or [message]


class AuthenticationError(CleanTaskError):
    """
    Missing, malformed, expired or badly signed token, or bad credentials.

    `reason` keeps the internal cause for logs and tests; the message sent to the
    client stays generic.
    """

    status_code = 401
    category = "authentication_error"

    def __init__(self, message: str, code: str | None = None, reason: str | None = None) -> None:
        super().__init__(message, code)
        self.reason = reason or self.code


class AuthorizationError(CleanTaskError):
    """Valid identity but insufficient role, or a forbidden action on one's own account."""

    status_code = 403
    category = "authorization_error"


class NotFoundError(CleanTaskError):
    status_code = 404
    category = "not_found"


class ConflictError(CleanTaskError):
    status_code = 409
    category = "conflict"
