"""
pushover-client — Pushover Open Client for Python.

Log in, register a device, and receive notifications over the push
WebSocket. Fetched messages are acknowledged (deleted server-side) as soon as
they are queued for the caller.
"""

from pushover_client.client import PushoverClient, AsyncPushoverClient
from pushover_client.auth import Auth
from pushover_client.messages import MessagesAPI, highest_relative_id
from pushover_client.session import SessionState
from pushover_client.frames import FrameAction, interpret_frame
from pushover_client.stream import NotificationStream, ReconnectPolicy, StreamState
from pushover_client.models.message import Message, parse_convertible_bool
from pushover_client.errors import (
    PushoverError,
    PreconditionError,
    NotAuthenticatedError,
    NotRegisteredError,
    AuthError,
    RegistrationError,
    FetchError,
    AckError,
    ConnectionError,
    StreamTimeoutError,
    ProtocolError,
    PermanentError,
)

__version__ = "0.1.0"
__all__ = [
    "PushoverClient",
    "AsyncPushoverClient",
    "Auth",
    "MessagesAPI",
    "highest_relative_id",
    "SessionState",
    "FrameAction",
    "interpret_frame",
    "NotificationStream",
    "ReconnectPolicy",
    "StreamState",
    "Message",
    "parse_convertible_bool",
    "PushoverError",
    "PreconditionError",
    "NotAuthenticatedError",
    "NotRegisteredError",
    "AuthError",
    "RegistrationError",
    "FetchError",
    "AckError",
    "ConnectionError",
    "StreamTimeoutError",
    "ProtocolError",
    "PermanentError",
]
