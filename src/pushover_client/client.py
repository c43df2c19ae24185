"""
PushoverClient / AsyncPushoverClient — main client classes.
"""

import asyncio
from typing import Any, AsyncGenerator, Generator, Iterable, Optional

import httpx

from pushover_client.auth import Auth
from pushover_client.messages import MessagesAPI
from pushover_client.models.message import Message
from pushover_client.session import SessionState
from pushover_client.stream import (
    DEFAULT_OPEN_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    Connector,
    NotificationStream,
    ReconnectPolicy,
    StreamState,
)
from pushover_client.transport.http import DEFAULT_API_URL, HttpClient
from pushover_client.transport.websocket import DEFAULT_PUSH_URL

DEFAULT_QUEUE_SIZE = 32


class AsyncPushoverClient:
    """Async Pushover Open Client (primary).

    Messages received by ``listen_for_notifications`` land in ``queue`` and are
    deleted from the server once queued, so drain and keep them yourself.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        push_url: str = DEFAULT_PUSH_URL,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        read_timeout: Optional[float] = DEFAULT_READ_TIMEOUT,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT,
        reconnect_policy: Optional[ReconnectPolicy] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        connector: Optional[Connector] = None,
    ):
        self.session = SessionState()
        self.http = HttpClient(base_url=api_url, transport=http_transport)
        self.auth = Auth(self.http, self.session)
        self.messages = MessagesAPI(self.http, self.session)
        self.queue: asyncio.Queue[Message] = asyncio.Queue(maxsize=queue_size)

        self._stream = NotificationStream(
            self.session,
            self.messages,
            self.queue,
            url=push_url,
            read_timeout=read_timeout,
            open_timeout=open_timeout,
            reconnect_policy=reconnect_policy,
            connector=connector,
        )

    # Session

    @property
    def user(self) -> tuple[str, str]:
        """``(user_id, secret)``; save these to restore the login later."""
        return self.session.user_id, self.session.secret

    @property
    def device_id(self) -> str:
        return self.session.device_id

    def status(self) -> tuple[bool, bool]:
        """``(authenticated, device_registered)``"""
        return self.session.status()

    def restore_login(self, secret: str, user_id: str) -> None:
        self.session.restore_login(secret, user_id)

    def restore_device(self, device_id: str) -> None:
        self.session.restore_device(device_id)

    async def login(self, email: str, password: str) -> tuple[str, str]:
        return await self.auth.login(email, password)

    async def register_device(self, name: str) -> str:
        return await self.auth.register_device(name)

    # Messages

    async def get_messages(self) -> list[Message]:
        """Fetch pending messages without deleting them."""
        return await self.messages.fetch()

    async def delete_old_messages(self, messages: Iterable[Message]) -> None:
        """Delete ``messages`` (and anything older) from the server. Permanent."""
        await self.messages.acknowledge_through(messages)

    async def delete_messages_by_id(self, highest_id: int) -> None:
        await self.messages.update_highest_message(highest_id)

    # Streaming

    @property
    def stream_state(self) -> StreamState:
        return self._stream.state

    @property
    def stream_error(self) -> Optional[Exception]:
        """Why the last stream terminated."""
        return self._stream.error

    async def listen_for_notifications(self) -> None:
        """Listen on the push connection until it fails; raises the failure.

        Run this as a background task and drain ``queue`` concurrently.
        """
        await self._stream.run()

    async def close_websocket(self) -> None:
        """Close the push connection, ending a running ``listen_for_notifications``."""
        await self._stream.close()

    async def notifications(self) -> AsyncGenerator[Message, None]:
        """Run the stream and yield delivered messages.

        Raises the stream's terminal error once every queued message has been
        yielded. Leaving the loop early stops the stream.
        """
        task = asyncio.ensure_future(self.listen_for_notifications())
        getter: Optional["asyncio.Future[Message]"] = None
        try:
            while True:
                getter = asyncio.ensure_future(self.queue.get())
                done, _ = await asyncio.wait({getter, task}, return_when=asyncio.FIRST_COMPLETED)
                if getter in done:
                    yield getter.result()
                    continue
                getter.cancel()
                break
            while not self.queue.empty():
                yield self.queue.get_nowait()
            task.result()
        finally:
            if getter is not None and not getter.done():
                getter.cancel()
            if not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

    async def close(self) -> None:
        await self.close_websocket()
        await self.http.close()


class PushoverClient:
    """Sync wrapper around AsyncPushoverClient. Runs the event loop internally."""

    def __init__(self, **kwargs: Any):
        self._async = AsyncPushoverClient(**kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def session(self) -> SessionState:
        return self._async.session

    @property
    def user(self) -> tuple[str, str]:
        return self._async.user

    @property
    def device_id(self) -> str:
        return self._async.device_id

    @property
    def stream_state(self) -> StreamState:
        return self._async.stream_state

    @property
    def stream_error(self) -> Optional[Exception]:
        return self._async.stream_error

    @property
    def queue(self) -> "asyncio.Queue[Message]":
        return self._async.queue

    def status(self) -> tuple[bool, bool]:
        return self._async.status()

    def restore_login(self, secret: str, user_id: str) -> None:
        self._async.restore_login(secret, user_id)

    def restore_device(self, device_id: str) -> None:
        self._async.restore_device(device_id)

    def login(self, email: str, password: str) -> tuple[str, str]:
        return self._run(self._async.login(email, password))

    def register_device(self, name: str) -> str:
        return self._run(self._async.register_device(name))

    def get_messages(self) -> list[Message]:
        return self._run(self._async.get_messages())

    def delete_old_messages(self, messages: Iterable[Message]) -> None:
        self._run(self._async.delete_old_messages(messages))

    def delete_messages_by_id(self, highest_id: int) -> None:
        self._run(self._async.delete_messages_by_id(highest_id))

    def listen_for_notifications(self) -> None:
        """Block until the stream fails, then raise the failure.

        Nothing drains ``queue`` meanwhile, so a full queue stalls the stream;
        use ``notifications()`` to consume as messages arrive.
        """
        self._run(self._async.listen_for_notifications())

    def close_websocket(self) -> None:
        self._run(self._async.close_websocket())

    def notifications(self) -> Generator[Message, None, None]:
        """Blocking iterator over delivered messages.

        The stream only makes progress while this generator is being advanced.
        """
        agen = self._async.notifications()
        try:
            while True:
                try:
                    yield self._run(agen.__anext__())
                except StopAsyncIteration:
                    return
        finally:
            self._run(agen.aclose())

    def close(self) -> None:
        self._run(self._async.close())
        self._loop.close()
