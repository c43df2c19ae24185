"""
Notification stream — owns the push connection and drives the read loop.

States: idle -> connecting -> authenticating -> listening, with
listening -> reconnecting -> connecting on a reload frame. Every other exit
is terminal: ``run()`` raises the terminal error and the stream stays
TERMINATED until ``run()`` is called again.

New-message frames are handled inline: fetch, push the batch onto the
delivery queue in server order, then acknowledge it. ``queue.put`` blocks when
the queue is full, which stalls the read loop (and the inactivity timer) until
the consumer catches up.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Awaitable, Callable, Optional

from pushover_client.errors import (
    ConnectionError,
    PermanentError,
    PreconditionError,
    ProtocolError,
    PushoverError,
    StreamTimeoutError,
)
from pushover_client.frames import FrameAction, interpret_frame
from pushover_client.messages import MessagesAPI
from pushover_client.models.message import Message
from pushover_client.session import SessionState
from pushover_client.transport.websocket import (
    DEFAULT_PUSH_URL,
    TRANSPORT_ERRORS,
    login_frame,
    open_connection,
)

DEFAULT_READ_TIMEOUT = 60.0
DEFAULT_OPEN_TIMEOUT = 10.0

logger = logging.getLogger(__name__)

Connector = Callable[[str], Awaitable[Any]]


class StreamState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    LISTENING = "listening"
    RECONNECTING = "reconnecting"
    TERMINATED = "terminated"


@dataclass
class ReconnectPolicy:
    """Bounds reconnects triggered by reload frames.

    The first reconnect is immediate. Consecutive reconnects on connections
    that never delivered a keep-alive or message back off exponentially, and
    more than ``max_attempts`` of them end the stream. ``max_attempts=None``
    never gives up.
    """
    max_attempts: Optional[int] = 5
    base_delay: float = 1.0
    max_delay: float = 30.0

    def delay(self, attempt: int) -> float:
        if attempt <= 1:
            return 0.0
        return min(self.base_delay * 2 ** (attempt - 2), self.max_delay)

    def exhausted(self, attempt: int) -> bool:
        return self.max_attempts is not None and attempt > self.max_attempts


class NotificationStream:
    def __init__(
        self,
        session: SessionState,
        messages: MessagesAPI,
        queue: "asyncio.Queue[Message]",
        url: str = DEFAULT_PUSH_URL,
        read_timeout: Optional[float] = DEFAULT_READ_TIMEOUT,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT,
        reconnect_policy: Optional[ReconnectPolicy] = None,
        connector: Optional[Connector] = None,
    ):
        self._session = session
        self._messages = messages
        self._queue = queue
        self._url = url
        self._read_timeout = read_timeout
        self._policy = reconnect_policy or ReconnectPolicy()
        self._connector = connector or partial(open_connection, open_timeout=open_timeout)
        self._conn: Any = None
        self._close_requested: Optional[asyncio.Event] = None
        self._state = StreamState.IDLE
        self._error: Optional[Exception] = None

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def error(self) -> Optional[Exception]:
        """Why the stream terminated, once it has."""
        return self._error

    @property
    def running(self) -> bool:
        return self._state not in (StreamState.IDLE, StreamState.TERMINATED)

    async def run(self) -> None:
        """Listen until a terminal failure, then raise it."""
        if self.running:
            raise PreconditionError("Notification stream is already running", code="stream_active")
        self._error = None
        self._close_requested = asyncio.Event()

        try:
            self._session.require_registered()
            self._session.begin_stream()
        except PreconditionError as e:
            self._terminate(e)
            raise
        self._state = StreamState.CONNECTING

        try:
            await self._run_loop()
        except PushoverError as e:
            self._terminate(e)
            raise
        except asyncio.CancelledError:
            self._terminate(ConnectionError("Notification stream cancelled"))
            raise
        finally:
            await self._drop_connection()
            self._session.end_stream()
            self._state = StreamState.TERMINATED

    async def close(self) -> None:
        """Close the live connection; the blocked read fails and the stream ends."""
        if self._close_requested is not None:
            self._close_requested.set()
        conn = self._conn
        if conn is not None:
            await conn.close()

    @property
    def _closing(self) -> bool:
        return self._close_requested is not None and self._close_requested.is_set()

    async def _run_loop(self) -> None:
        attempt = 0
        while True:
            conn = await self._connect()
            healthy = await self._listen(conn)

            self._state = StreamState.RECONNECTING
            await self._drop_connection()
            attempt = 1 if healthy else attempt + 1
            if self._policy.exhausted(attempt):
                raise ConnectionError(f"Giving up after {attempt - 1} consecutive reconnects")

            delay = self._policy.delay(attempt)
            if delay:
                logger.warning("Reconnect attempt %d in %.1fs", attempt, delay)
                await self._wait_or_close(delay)
            if self._closing:
                raise ConnectionError("Notification stream closed")

    async def _connect(self) -> Any:
        self._state = StreamState.CONNECTING
        logger.info("Connecting to %s", self._url)
        try:
            conn = await self._connector(self._url)
        except (asyncio.TimeoutError, *TRANSPORT_ERRORS) as e:
            raise ConnectionError(f"Failed to connect to {self._url}: {e}") from e
        self._conn = conn
        if self._closing:
            raise ConnectionError("Notification stream closed")

        self._state = StreamState.AUTHENTICATING
        try:
            await conn.send(login_frame(self._session.device_id, self._session.secret))
        except TRANSPORT_ERRORS as e:
            raise ConnectionError(f"Failed to send login frame: {e}") from e

        self._state = StreamState.LISTENING
        logger.info("Listening for notifications")
        return conn

    async def _listen(self, conn: Any) -> bool:
        """Process frames until a reload frame.

        Returns whether this connection handled a keep-alive or message frame.
        """
        healthy = False
        while True:
            frame = await self._read(conn)
            action = interpret_frame(frame)
            if action is None:
                continue
            logger.debug("Frame %r -> %s", frame, action.value)

            if action is FrameAction.KEEP_ALIVE:
                healthy = True
            elif action is FrameAction.SYNC:
                await self._sync()
                healthy = True
            elif action is FrameAction.RELOAD:
                logger.info("Server requested reload, reconnecting")
                return healthy
            elif action is FrameAction.ERROR:
                raise PermanentError()
            else:
                raise ProtocolError(
                    f"Unexpected frame received from server: {bytes(frame)[:32]!r}",
                    details=bytes(frame),
                )

    async def _read(self, conn: Any) -> Any:
        try:
            if self._read_timeout is None:
                return await conn.recv()
            return await asyncio.wait_for(conn.recv(), timeout=self._read_timeout)
        except asyncio.TimeoutError as e:
            raise StreamTimeoutError(f"No frame received for {self._read_timeout}s") from e
        except TRANSPORT_ERRORS as e:
            if self._closing:
                raise ConnectionError("Notification stream closed") from e
            raise ConnectionError(f"Read failed: {e}") from e

    async def _sync(self) -> None:
        messages = await self._messages.fetch()
        for message in messages:
            await self._queue.put(message)
        await self._messages.acknowledge_through(messages)
        logger.info("Delivered %d message(s)", len(messages))

    async def _wait_or_close(self, delay: float) -> None:
        if self._close_requested is None:
            await asyncio.sleep(delay)
            return
        try:
            await asyncio.wait_for(self._close_requested.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    async def _drop_connection(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            await conn.close()
        except TRANSPORT_ERRORS:
            logger.debug("Error while closing push connection", exc_info=True)

    def _terminate(self, error: Exception) -> None:
        self._state = StreamState.TERMINATED
        self._error = error
        logger.info("Notification stream terminated: %s", error)
