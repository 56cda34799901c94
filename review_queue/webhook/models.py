"""Pydantic models for Slack Events API payloads.

Only the parts the bot acts on are modelled. The outer envelope is either a
``url_verification`` challenge or an ``event_callback``; the inner event of a
callback is decoded into a tagged variant:

- :class:`MessageEvent` for ``type == "message"``
- :class:`UnsupportedEvent` for anything else, keeping the raw payload

Examples
--------
.. code-block:: python

    envelope = deserialize({"type": "event_callback", "event": {"type": "message", "text": "queue list"}})
    match envelope.inner_event():
        case MessageEvent() as message:
            ...
        case UnsupportedEvent() as other:
            ...
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

__all__: list[str] = [
    "UrlVerificationModel",
    "SlackEventModel",
    "MessageEvent",
    "UnsupportedEvent",
    "InnerEvent",
    "SlackEnvelope",
    "decode_inner_event",
    "deserialize",
]


class UrlVerificationModel(BaseModel):
    """Challenge sent by Slack when the events URL is configured."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["url_verification"]
    challenge: str
    token: Optional[str] = None


class MessageEvent(BaseModel):
    """A ``message`` event posted in a channel the bot is a member of."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["message"]
    channel: str
    text: str = ""
    user: Optional[str] = None
    ts: Optional[str] = None
    thread_ts: Optional[str] = None
    subtype: Optional[str] = None
    bot_id: Optional[str] = None

    @property
    def is_from_bot(self) -> bool:
        return self.bot_id is not None or self.subtype == "bot_message"


class UnsupportedEvent(BaseModel):
    """Any inner event type the bot does not handle."""

    type: str = "unknown"
    raw: Dict[str, Any] = Field(default_factory=dict)


InnerEvent = Union[MessageEvent, UnsupportedEvent]


class SlackEventModel(BaseModel):
    """``event_callback`` envelope wrapping one inner event."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["event_callback"]
    event: Dict[str, Any]
    team_id: Optional[str] = None
    api_app_id: Optional[str] = None
    event_id: Optional[str] = None
    event_time: Optional[int] = None

    def inner_event(self) -> InnerEvent:
        return decode_inner_event(self.event)


SlackEnvelope = Annotated[Union[UrlVerificationModel, SlackEventModel], Field(discriminator="type")]

_ENVELOPE_ADAPTER: TypeAdapter[UrlVerificationModel | SlackEventModel] = TypeAdapter(SlackEnvelope)


def decode_inner_event(data: Dict[str, Any]) -> InnerEvent:
    """Decode the inner event of a callback into its tagged variant.

    A ``message`` payload missing required fields is treated as unsupported.
    """
    event_type = str(data.get("type") or "unknown")
    if event_type == "message" and isinstance(data.get("channel"), str):
        return MessageEvent.model_validate(data)
    return UnsupportedEvent(type=event_type, raw=data)


def deserialize(payload: Dict[str, Any]) -> UrlVerificationModel | SlackEventModel:
    """Validate a Slack Events API request body.

    Raises
    ------
    pydantic.ValidationError
        If the envelope type is not supported or required fields are missing
    """
    return _ENVELOPE_ADAPTER.validate_python(payload)
