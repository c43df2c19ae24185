"""
Message and reply models for the Open Client API.
"""

from datetime import datetime, timezone
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator


def parse_convertible_bool(value: Any) -> bool:
    """Decode a flag sent either as ``0``/``1`` or as ``false``/``true``.

    Any other token is malformed input and raises ``ValueError``.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return value == 1
    raise ValueError(f"Boolean unmarshal error: invalid input {value!r}")


def epoch_to_datetime(seconds: int) -> datetime:
    """UTC instant for an epoch value; ``ValueError`` if the platform cannot represent it."""
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"timestamp {seconds} out of range: {e}") from e


class Message(BaseModel):
    """One queued notification as returned by ``messages.json``.

    ``relative_id`` only orders acknowledgments for this device; use
    ``unique_id`` to de-duplicate re-delivered messages.
    """

    model_config = ConfigDict(populate_by_name=True)

    relative_id: int = Field(alias="id")
    unique_id: int = Field(alias="umid")
    title: str = ""
    text: str = Field(default="", alias="message")
    app_name: str = Field(default="", alias="app")
    app_id: int = Field(default=0, alias="aid")
    icon_id: str = Field(default="", alias="icon")
    timestamp: int = Field(default=0, alias="date")
    priority: int = 0
    sound: str = ""
    url: str = ""
    url_title: str = ""
    acknowledged: bool = Field(default=False, alias="acked")
    receipt_code: str = Field(default="", alias="receipt")
    contains_html: bool = Field(default=False, alias="html")

    # Derived from ``timestamp`` once; private so it is never serialized back.
    _date: datetime = PrivateAttr()

    @field_validator("acknowledged", "contains_html", mode="before")
    @classmethod
    def _convertible_bool(cls, v: Any) -> bool:
        return parse_convertible_bool(v)

    @field_validator("timestamp")
    @classmethod
    def _representable_timestamp(cls, v: int) -> int:
        epoch_to_datetime(v)
        return v

    def model_post_init(self, __context: Any) -> None:
        self._date = epoch_to_datetime(self.timestamp)

    @property
    def date(self) -> datetime:
        return self._date


class LoginReply(BaseModel):
    """users/login.json"""
    status: int
    id: str = ""
    secret: str = ""
    errors: list[str] = []


class DeviceReply(BaseModel):
    """devices.json: errors are keyed by the offending field."""
    status: int
    id: str = ""
    errors: Union[dict[str, list[str]], list[str]] = []


class MessagesReply(BaseModel):
    """messages.json: messages stay raw so they can be validated one by one."""
    status: int
    errors: list[str] = []
    messages: list[dict[str, Any]] = []


class AckReply(BaseModel):
    """devices/<id>/update_highest_message.json"""
    status: int
    errors: list[str] = []
