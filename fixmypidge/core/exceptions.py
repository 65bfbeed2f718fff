"""Domain error taxonomy shared by the API and the client."""


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(AppError):
    """Malformed input, unknown event kind or cross-entity mismatch."""

    status_code = 400
    default_detail = "Invalid request"


class AuthorizationError(AppError):
    """Missing or invalid credentials. The detail is always uniform."""

    status_code = 401
    default_detail = "Unauthorized"

    def __init__(self, detail: str | None = None):
        super().__init__(self.default_detail)


class NotFoundError(AppError):
    """Unknown identifier, or a record the actor is not allowed to see."""

    status_code = 404
    default_detail = "Not found"


class DependencyError(AppError):
    """Store or network failure. Safe to retry."""

    status_code = 500
    default_detail = "Internal server error"


class PayloadTooLargeError(ValidationError):
    status_code = 413
    default_detail = "Payload too large"
