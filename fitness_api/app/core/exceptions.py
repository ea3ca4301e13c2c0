"""
Domain exceptions raised by the service layer.

Services stay independent of FastAPI: they raise one of the
exceptions below and ``main.create_app`` installs a handler that maps
``ServiceError.status_code`` onto the HTTP response.  All of them
derive from ``ValueError`` so callers that only care about "the
operation was rejected" can keep catching ``ValueError``.
"""

from fastapi import status


class ServiceError(ValueError):
    """Base class for errors surfaced to API clients."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class BadRequestError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
