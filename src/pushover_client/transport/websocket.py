"""
Persistent push connection — wss://client.pushover.net/push.

The client writes exactly one text line after connecting; everything after
that is server-to-client frames.
"""

from typing import Any

import websockets
from websockets.exceptions import WebSocketException

DEFAULT_PUSH_URL = "wss://client.pushover.net/push"

# Anything raised by the socket layer that means "this connection is gone".
TRANSPORT_ERRORS = (OSError, WebSocketException)


def login_frame(device_id: str, secret: str) -> str:
    return f"login:{device_id}:{secret}\n"


async def open_connection(url: str, open_timeout: float = 10.0) -> Any:
    """Dial the push endpoint. Returns a connection with send/recv/close."""
    return await websockets.connect(url, open_timeout=open_timeout)
