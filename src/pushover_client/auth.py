"""
Auth module — user login and device registration.

Both exchange something human-readable for durable identifiers that should be
saved and later passed to ``restore_login`` / ``restore_device``.
"""

import httpx
from pydantic import ValidationError

from pushover_client.errors import (
    AuthError,
    PreconditionError,
    PushoverError,
    RegistrationError,
    describe_errors,
)
from pushover_client.models.message import DeviceReply, LoginReply
from pushover_client.session import SessionState
from pushover_client.transport.http import HttpClient

MAX_DEVICE_NAME_LENGTH = 25
# "O" identifies an Open Client device.
DEVICE_OS = "O"


class Auth:
    def __init__(self, http: HttpClient, session: SessionState):
        self._http = http
        self._session = session

    async def login(self, email: str, password: str) -> tuple[str, str]:
        """Log in and return ``(user_id, secret)``. Any previous device is forgotten."""
        if self._session.authenticated:
            raise PreconditionError("Already logged in", code="already_authenticated")
        try:
            raw = await self._http.post("/users/login.json", {"email": email, "password": password})
            reply = LoginReply.model_validate(raw)
        except (httpx.HTTPError, PushoverError, ValidationError) as e:
            raise AuthError(f"Failed to log in: {e}") from e

        if reply.status != 1:
            raise AuthError(describe_errors(reply.errors), details=reply.errors)

        self._session.set_login(reply.id, reply.secret, reset_device=True)
        return reply.id, reply.secret

    async def register_device(self, name: str) -> str:
        """Register this client as a device named ``name`` (at most 25 characters)."""
        self._session.require_authenticated()
        if self._session.device_registered:
            raise PreconditionError("Already registered", code="already_registered")
        if len(name) > MAX_DEVICE_NAME_LENGTH:
            raise PreconditionError("Name is too long", code="name_too_long")

        try:
            raw = await self._http.post(
                "/devices.json",
                {"secret": self._session.secret, "name": name, "os": DEVICE_OS},
            )
            reply = DeviceReply.model_validate(raw)
        except (httpx.HTTPError, PushoverError, ValidationError) as e:
            raise RegistrationError(f"Failed to register device: {e}") from e

        if reply.status != 1:
            raise RegistrationError(describe_errors(reply.errors), details=reply.errors)

        self._session.set_device(reply.id)
        return reply.id
