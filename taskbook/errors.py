"""Error taxonomy shared by the gateways and the HTTP surface.

Every gateway failure is one of these; provider and database exceptions are
translated at the gateway boundary and never reach the caller.
"""
from typing import Optional

from fastapi import status


class TaskbookError(Exception):
    """Base class for all typed failures."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message}


class ValidationError(TaskbookError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Invalid input."


class Unauthenticated(TaskbookError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "User not authenticated."


class Forbidden(TaskbookError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden."


class NotFound(TaskbookError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class AlreadyExists(TaskbookError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "This email is already registered."


class InvalidCredentials(TaskbookError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password."


class WeakCredential(TaskbookError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Password is too weak."


class PartialFailure(TaskbookError):
    """A multi-step operation committed its first step only."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Operation partially completed."

    def __init__(self, message: Optional[str] = None, user_id: Optional[str] = None):
        super().__init__(message)
        self.user_id = user_id

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["userId"] = self.user_id
        return payload


class UpstreamUnavailable(TaskbookError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service temporarily unavailable. Please try again."
