"""Typed errors raised by the photo client."""


class PhotoClientError(Exception):
    """Base class for every error surfaced by the client."""


class ValidationError(PhotoClientError):
    """A client-side precondition failed before any request was sent."""


class NetworkError(PhotoClientError):
    """The request was sent but no response was received."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class PhotoApiError(PhotoClientError):
    """The server answered with a non-2xx status."""

    def __init__(
        self, status_code: int, path: str | None = None, detail: str | None = None
    ) -> None:
        message = f"HTTP {status_code}"
        if path:
            message = f"{message} on {path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.status_code = status_code
        self.path = path
        self.detail = detail


class AuthError(PhotoApiError):
    """401 or 403; never retried automatically."""


class NotFoundError(PhotoApiError):
    """404."""


class ConflictError(PhotoApiError):
    """409."""


class ServiceUnavailableError(PhotoApiError):
    """503."""


class UnclassifiedApiError(PhotoApiError):
    """Any other non-2xx status."""


_STATUS_ERRORS: dict[int, type[PhotoApiError]] = {
    401: AuthError,
    403: AuthError,
    404: NotFoundError,
    409: ConflictError,
    503: ServiceUnavailableError,
}


def classify_http_error(
    status_code: int, path: str | None = None, detail: str | None = None
) -> PhotoApiError:
    """Build the typed error for an HTTP status code."""
    error_type = _STATUS_ERRORS.get(status_code, UnclassifiedApiError)
    return error_type(status_code, path=path, detail=detail)
