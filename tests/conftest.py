"""Shared fakes: an httpx MockTransport standing in for the API and an in-memory push socket."""

import asyncio
from typing import Any, Callable, Optional
from urllib.parse import parse_qs

import httpx
import pytest

from pushover_client import AsyncPushoverClient

SECRET = "s3cret"
USER_ID = "uQiRzpo4DXghDmr9QzzfQu27cmVRsG"
DEVICE_ID = "dev1"

_CLOSED = object()


def raw_message(relative_id: int, unique_id: Optional[int] = None, **fields: Any) -> dict[str, Any]:
    msg = {
        "id": relative_id,
        "umid": unique_id if unique_id is not None else 1000 + relative_id,
        "title": f"Title {relative_id}",
        "message": f"Body {relative_id}",
        "app": "Pushover",
        "aid": 1,
        "icon": "pushover",
        "date": 1700000000 + relative_id,
        "priority": 0,
        "acked": 0,
    }
    msg.update(fields)
    return msg


def form(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


class FakeApi:
    """Records every request and answers like the Open Client API."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.batches: list[list[dict[str, Any]]] = []
        self.fetch_reply: Optional[dict[str, Any]] = None
        self.ack_reply: dict[str, Any] = {"status": 1, "request": "ack"}
        self.login_reply: tuple[int, Any] = (200, {"status": 1, "id": USER_ID, "secret": SECRET, "request": "l"})
        self.device_reply: tuple[int, Any] = (200, {"status": 1, "id": DEVICE_ID, "request": "d"})
        self.on_ack: Optional[Callable[[httpx.Request], None]] = None
        self.raise_error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        path = request.url.path
        if path.endswith("/messages.json"):
            if self.fetch_reply is not None:
                return httpx.Response(200, json=self.fetch_reply)
            msgs = self.batches.pop(0) if self.batches else []
            return httpx.Response(200, json={"status": 1, "messages": msgs, "request": "f"})
        if path.endswith("/update_highest_message.json"):
            if self.on_ack is not None:
                self.on_ack(request)
            return httpx.Response(200, json=self.ack_reply)
        if path.endswith("/users/login.json"):
            code, body = self.login_reply
            return self._reply(code, body)
        if path.endswith("/devices.json"):
            code, body = self.device_reply
            return self._reply(code, body)
        return httpx.Response(404, json={"status": 0, "errors": ["not found"]})

    @staticmethod
    def _reply(code: int, body: Any) -> httpx.Response:
        if isinstance(body, str):
            return httpx.Response(code, text=body)
        return httpx.Response(code, json=body)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    @property
    def fetches(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/messages.json")]

    @property
    def acks(self) -> list[int]:
        return [
            int(form(r)["message"])
            for r in self.requests
            if r.url.path.endswith("/update_highest_message.json")
        ]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakeConnection:
    """In-memory push socket. ``recv`` blocks until a frame is fed or the socket closes."""

    def __init__(self, frames: tuple = ()) -> None:
        self.sent: list[str] = []
        self.closed = False
        self._frames: asyncio.Queue = asyncio.Queue()
        for frame in frames:
            self._frames.put_nowait(frame)

    def feed(self, frame: Any) -> None:
        self._frames.put_nowait(frame)

    async def send(self, data: str) -> None:
        if self.closed:
            raise ConnectionResetError("socket closed")
        self.sent.append(data)

    async def recv(self) -> Any:
        item = await self._frames.get()
        if item is _CLOSED:
            self._frames.put_nowait(_CLOSED)
            raise ConnectionResetError("socket closed")
        return item

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._frames.put_nowait(_CLOSED)


class FakeConnector:
    """Hands out prepared connections in order; refuses once they run out."""

    def __init__(self) -> None:
        self.connections: list[FakeConnection] = []
        self.urls: list[str] = []
        self.opened: list[FakeConnection] = []

    def add(self, *frames: Any) -> FakeConnection:
        conn = FakeConnection(frames)
        self.connections.append(conn)
        return conn

    async def __call__(self, url: str) -> FakeConnection:
        self.urls.append(url)
        if not self.connections:
            raise ConnectionRefusedError("no server")
        conn = self.connections.pop(0)
        self.opened.append(conn)
        return conn


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.005)


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def make_client(api, connector):
    def _make(registered: bool = True, **kwargs: Any) -> AsyncPushoverClient:
        client = AsyncPushoverClient(http_transport=api.transport(), connector=connector, **kwargs)
        if registered:
            client.restore_login(SECRET, USER_ID)
            client.restore_device(DEVICE_ID)
        return client
    return _make


@pytest.fixture
def client(make_client) -> AsyncPushoverClient:
    return make_client()
