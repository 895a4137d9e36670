# src/workdesk/remote/errors.py

from __future__ import annotations

NETWORK_ERROR_MESSAGE = "Cannot reach server. Check your connection and try again."


class WorkdeskError(Exception):
    """Base for every error the remote client raises."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class ValidationError(WorkdeskError):
    """Missing or empty required field (client- or server-side)."""


class AuthError(WorkdeskError):
    """Bad credentials."""


class ConflictError(WorkdeskError):
    """Duplicate username on registration."""


class NotFoundError(WorkdeskError):
    """Target id does not exist or belongs to another user."""


class NetworkError(WorkdeskError):
    """Transport failed before any HTTP response arrived."""


class ServerError(WorkdeskError):
    """5xx, unexpected status, or malformed response body."""


def friendly_error_message(err: Exception) -> str:
    if isinstance(err, NetworkError):
        return NETWORK_ERROR_MESSAGE
    if isinstance(err, ServerError):
        return f"Server error: {err.message}"
    if isinstance(err, WorkdeskError):
        return err.message
    msg = str(err).strip()
    return msg or "Something went wrong."
