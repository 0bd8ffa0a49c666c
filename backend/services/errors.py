"""Typed failures raised by domain services and rendered by the API layer."""

from __future__ import annotations

from fastapi import status


class ServiceError(Exception):
    """Base class for failures a route may surface to the client."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None, *, data: object | None = None) -> None:
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class InvalidOperation(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid operation"


class DuplicateConstraint(ServiceError):
    """A uniqueness rule was violated; ``field`` names the column when known."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Already in use"

    def __init__(self, field: str | None = None, message: str | None = None) -> None:
        self.field = field
        if message is None:
            message = f"{field.capitalize()} already taken" if field else self.default_message
        super().__init__(message, data={"field": field} if field else None)


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class UpstreamFailure(ServiceError):
    """An external dependency (object storage) failed.

    The message sent to clients stays generic; ``detail`` is for logs only.
    """

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upstream service failed"

    def __init__(self, message: str | None = None, *, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(message)


__all__ = [
    "ServiceError",
    "NotFound",
    "Forbidden",
    "InvalidOperation",
    "DuplicateConstraint",
    "Unauthorized",
    "UpstreamFailure",
]
