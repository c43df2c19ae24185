"""
Pushover client error types.

Precondition errors are raised before any network call. Remote-service errors
carry the service's own error list in ``details``.
"""

from typing import Any, Optional


class PushoverError(Exception):
    def __init__(self, code: str, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class PreconditionError(PushoverError):
    def __init__(self, message: str, code: str = "precondition_error"):
        super().__init__(code, message)


class NotAuthenticatedError(PreconditionError):
    def __init__(self, message: str = "Not logged in"):
        super().__init__(message, code="not_authenticated")


class NotRegisteredError(PreconditionError):
    def __init__(self, message: str = "Device not registered"):
        super().__init__(message, code="not_registered")


class AuthError(PushoverError):
    def __init__(self, message: str, code: str = "auth_error", details: Optional[Any] = None):
        super().__init__(code, message, details)


class RegistrationError(PushoverError):
    def __init__(self, message: str, code: str = "registration_error", details: Optional[Any] = None):
        super().__init__(code, message, details)


class FetchError(PushoverError):
    """Fetch failed. ``messages`` holds whatever was parsed before the failure."""

    def __init__(self, message: str, messages: Optional[list[Any]] = None, details: Optional[Any] = None):
        super().__init__("fetch_error", message, details)
        self.messages = messages or []


class AckError(PushoverError):
    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__("ack_error", message, details)


class ConnectionError(PushoverError):
    def __init__(self, message: str, code: str = "connection_error"):
        super().__init__(code, message)


class StreamTimeoutError(ConnectionError):
    def __init__(self, message: str):
        super().__init__(message, code="stream_timeout")


class ProtocolError(PushoverError):
    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__("protocol_error", message, details)


class PermanentError(PushoverError):
    """Server sent an error frame. Re-login or re-register before reconnecting."""

    def __init__(self, message: str = "Permanent error reported by server; log in or register the device again"):
        super().__init__("permanent_error", message)


def describe_errors(errors: Any) -> str:
    """Render a service error list (or field -> messages mapping) as one string."""
    if isinstance(errors, dict):
        parts = [f"{field} {msg}" for field, msgs in errors.items() for msg in (msgs or [])]
    elif isinstance(errors, list):
        parts = [str(e) for e in errors]
    else:
        parts = []
    return ", ".join(parts) or "unknown error"
