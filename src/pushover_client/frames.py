"""
Push frame interpreter.

Only binary frames carry meaning. Each is a single token:

    #  keep-alive, nothing to do
    !  new message(s) waiting, sync now
    R  reload requested, reconnect
    E  permanent error, do not reconnect

Any other binary payload is a protocol violation.
"""

from enum import Enum
from typing import Any, Optional


class FrameAction(str, Enum):
    KEEP_ALIVE = "keep_alive"
    SYNC = "sync"
    RELOAD = "reload"
    ERROR = "error"
    PROTOCOL_VIOLATION = "protocol_violation"


_ACTIONS = {
    b"#": FrameAction.KEEP_ALIVE,
    b"!": FrameAction.SYNC,
    b"R": FrameAction.RELOAD,
    b"E": FrameAction.ERROR,
}


def is_binary(frame: Any) -> bool:
    return isinstance(frame, (bytes, bytearray, memoryview))


def interpret_frame(frame: Any) -> Optional[FrameAction]:
    """Map one received frame to an action. Non-binary frames map to ``None``."""
    if not is_binary(frame):
        return None
    return _ACTIONS.get(bytes(frame), FrameAction.PROTOCOL_VIOLATION)
