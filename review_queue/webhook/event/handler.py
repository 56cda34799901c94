"""Route decoded Slack events to the queue lifecycle engine.

:class:`QueueCommandHandler` is the seam between the webhook server and the
coordinator. It decodes nothing and sends nothing: it takes an already decoded
inner event, runs the command synchronously and returns the :class:`Reply` to
deliver. Delivery happens afterwards in :func:`deliver_reply`, when the
registry lock is no longer held.

Quick Example
=============
.. code-block:: python

    from review_queue.coordinator import QueueLifecycleEngine, QueueRegistry
    from review_queue.webhook.event.handler import QueueCommandHandler
    from review_queue.webhook.models import MessageEvent

    handler = QueueCommandHandler(QueueLifecycleEngine(QueueRegistry()))
    reply = handler.handle_event(
        MessageEvent(type="message", channel="C123", user="U123", text="queue list")
    )
    assert reply.text == "No queues available."
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Optional

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from review_queue.coordinator import (
    DEFAULT_PREFIX,
    MalformedCommand,
    QueueError,
    QueueLifecycleEngine,
    parse_command,
)

from ..models import InnerEvent, MessageEvent, UnsupportedEvent

__all__: list[str] = [
    "Reply",
    "QueueCommandHandler",
    "deliver_reply",
]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Reply:
    """Text to post back to the channel a command came from."""

    channel: str
    text: str


class QueueCommandHandler:
    """Turn chat messages into queue commands and their replies.

    Parameters
    ----------
    engine : QueueLifecycleEngine
        Engine executing the commands
    prefix : str
        Command prefix required in channel messages (default: ``queue``)
    bot_user_id : Optional[str]
        The bot's own user id; its messages are ignored
    """

    def __init__(
        self,
        engine: QueueLifecycleEngine,
        prefix: str = DEFAULT_PREFIX,
        bot_user_id: Optional[str] = None,
    ) -> None:
        self.engine = engine
        self.prefix = prefix
        self.bot_user_id = bot_user_id

    def handle_event(self, event: InnerEvent) -> Optional[Reply]:
        """Handle one decoded inner event.

        Returns
        -------
        Optional[Reply]
            The reply to post, or None if the event needs no answer
        """
        match event:
            case MessageEvent():
                return self.on_message(event)
            case UnsupportedEvent(type=event_type):
                _LOG.warning(f"Unsupported inner event type: {event_type}")
                return None
            case _:
                _LOG.warning(f"Unsupported inner event: {type(event).__name__}")
                return None

    def on_message(self, event: MessageEvent) -> Optional[Reply]:
        if event.is_from_bot or event.subtype or not event.user:
            _LOG.debug(f"Ignoring message with subtype={event.subtype} bot_id={event.bot_id}")
            return None
        if self.bot_user_id and event.user == self.bot_user_id:
            return None

        text = self.handle_text(event.text, user=event.user, channel=event.channel)
        if text is None:
            return None
        return Reply(channel=event.channel, text=text)

    def handle_text(self, text: str, user: str, channel: str, require_prefix: bool = True) -> Optional[str]:
        """Parse and execute ``text``, rendering coordinator errors as reply text.

        Returns
        -------
        Optional[str]
            Reply text, or None if ``text`` is not a queue command
        """
        try:
            command = parse_command(text, prefix=self.prefix, require_prefix=require_prefix)
        except MalformedCommand as e:
            _LOG.info(f"Malformed command from {user}: {e}")
            return e.message

        if command is None:
            _LOG.info(f"Unrecognized command: {text.strip()}")
            return None

        try:
            return self.engine.execute(command, user=user, channel=channel)
        except QueueError as e:
            _LOG.info(f"Command '{command.verb}' from {user} failed: {e}")
            return e.message


async def deliver_reply(client: AsyncWebClient, reply: Reply) -> None:
    """Post ``reply`` to its channel. Slack API errors are logged, not raised."""
    try:
        await client.chat_postMessage(channel=reply.channel, text=reply.text)
    except SlackApiError as e:
        _LOG.error(f"Failed to post reply to channel {reply.channel}: {e.response.get('error', e)}")
