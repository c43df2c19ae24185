"""
Session state — credentials, device registration and the acknowledgment mark.

Populated by login/registration or restored from saved values. Mutation is
refused while a notification stream is running.
"""

from pushover_client.errors import NotAuthenticatedError, NotRegisteredError, PreconditionError


class SessionState:
    def __init__(self) -> None:
        self.authenticated = False
        self.device_registered = False
        self.user_id = ""
        self.secret = ""
        self.device_id = ""
        # Highest relative id acknowledged for this device in this process.
        self.high_water_mark = 0
        self._stream_active = False

    def status(self) -> tuple[bool, bool]:
        return self.authenticated, self.device_registered

    @property
    def stream_active(self) -> bool:
        return self._stream_active

    def restore_login(self, secret: str, user_id: str) -> None:
        """Resume a previous login without contacting the service."""
        self.set_login(user_id, secret)

    def restore_device(self, device_id: str) -> None:
        """Resume a previous device registration without contacting the service."""
        self.set_device(device_id)

    def set_login(self, user_id: str, secret: str, reset_device: bool = False) -> None:
        self._ensure_idle("login")
        self.user_id = user_id
        self.secret = secret
        self.authenticated = True
        if reset_device:
            self.device_registered = False
            self.device_id = ""
            self.high_water_mark = 0

    def set_device(self, device_id: str) -> None:
        self._ensure_idle("device")
        if device_id != self.device_id:
            self.high_water_mark = 0
        self.device_id = device_id
        self.device_registered = True

    def require_authenticated(self) -> None:
        if not self.authenticated:
            raise NotAuthenticatedError()

    def require_registered(self) -> None:
        # Both flags are checked: restored state may hold a device without a login.
        if not self.authenticated:
            raise NotAuthenticatedError()
        if not self.device_registered:
            raise NotRegisteredError()

    def begin_stream(self) -> None:
        if self._stream_active:
            raise PreconditionError("A notification stream is already running", code="stream_active")
        self._stream_active = True

    def end_stream(self) -> None:
        self._stream_active = False

    def _ensure_idle(self, what: str) -> None:
        if self._stream_active:
            raise PreconditionError(
                f"Cannot change {what} while a notification stream is running",
                code="stream_active",
            )
