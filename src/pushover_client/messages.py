"""
Message sync — fetch pending messages and acknowledge them.

Acknowledging sends a high-water mark: the server deletes every message whose
relative id is at or below it. The mark is always computed from a concrete
batch, so only messages that were actually handed out get deleted.
"""

import logging
from collections.abc import Iterable

import httpx
from pydantic import ValidationError

from pushover_client.errors import AckError, FetchError, PushoverError, describe_errors
from pushover_client.models.message import AckReply, Message, MessagesReply
from pushover_client.session import SessionState
from pushover_client.transport.http import HttpClient

logger = logging.getLogger(__name__)


def highest_relative_id(messages: Iterable[Message]) -> int:
    """Largest relative id in the batch, 0 for an empty batch."""
    return max((m.relative_id for m in messages), default=0)


class MessagesAPI:
    def __init__(self, http: HttpClient, session: SessionState):
        self._http = http
        self._session = session

    async def fetch(self) -> list[Message]:
        """Download every pending message for this device, in server order.

        On failure the raised ``FetchError`` still carries the messages that
        were parsed, in ``FetchError.messages``.
        """
        self._session.require_registered()
        try:
            raw = await self._http.get(
                "/messages.json",
                params={"secret": self._session.secret, "device_id": self._session.device_id},
            )
            reply = MessagesReply.model_validate(raw)
        except (httpx.HTTPError, PushoverError, ValidationError) as e:
            raise FetchError(f"Failed to fetch messages: {e}") from e

        messages: list[Message] = []
        for item in reply.messages:
            try:
                messages.append(Message.model_validate(item))
            except ValidationError as e:
                raise FetchError(f"Malformed message in reply: {e}", messages=messages) from e

        if reply.status != 1:
            raise FetchError(
                f"Getting messages led to status {reply.status}: {describe_errors(reply.errors)}",
                messages=messages,
                details=reply.errors,
            )

        logger.debug("Fetched %d message(s)", len(messages))
        return messages

    async def acknowledge_through(self, messages: Iterable[Message]) -> None:
        """Delete every message up to the highest relative id in ``messages``."""
        await self.update_highest_message(highest_relative_id(messages))

    async def update_highest_message(self, highest_id: int) -> None:
        """Send ``highest_id`` as the new high-water mark.

        A mark at or below the one already sent in this session is a no-op:
        the server would delete nothing new, and the mark never moves backwards.
        """
        self._session.require_registered()
        if highest_id <= self._session.high_water_mark:
            logger.debug("Mark %d not above %d, nothing to acknowledge", highest_id, self._session.high_water_mark)
            return

        try:
            raw = await self._http.post(
                f"/devices/{self._session.device_id}/update_highest_message.json",
                {"secret": self._session.secret, "message": str(highest_id)},
            )
            reply = AckReply.model_validate(raw)
        except (httpx.HTTPError, PushoverError, ValidationError) as e:
            raise AckError(f"Failed to acknowledge messages: {e}") from e

        if reply.status != 1:
            raise AckError(describe_errors(reply.errors), details=reply.errors)

        self._session.high_water_mark = highest_id
        logger.debug("Acknowledged messages through %d", highest_id)
