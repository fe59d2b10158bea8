from typing import Dict, Optional

from fastapi import status


class ApiError(Exception):
    """Base class for errors that are rendered straight into a response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class InvalidUpdatePayload(ValidationError):
    default_message = "Invalid updates"


class InvalidCredentials(ValidationError):
    # Same message whether the email or the password was wrong.
    default_message = "Unable to login"


class AuthenticationFailed(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Please authenticate"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalFailure(ApiError):
    pass


def describe_errors(errors) -> str:
    """Flatten pydantic error dicts into one readable message."""
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or ValidationError.default_message
