from typing import Optional


class PostWallError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PostWallError):
    """Bad input shape or content. Carries the offending field when known."""
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class UnauthorizedError(PostWallError):
    status_code = 403

    def __init__(self, message: str = "Unauthorized access"):
        super().__init__(message)


class NotFoundError(PostWallError):
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class BackendFailure(PostWallError):
    """Storage problem surfaced by the post store. The message is safe to show."""
    status_code = 500


class BackendError(Exception):
    """Raised by key-value backends on I/O or type errors."""
