"""Error taxonomy of the review queue coordinator.

Every error is per request and recoverable: the webhook layer renders
``str(error)`` back to the channel as a plain reply.
"""

from __future__ import annotations

__all__: list[str] = [
    "QueueError",
    "MalformedCommand",
    "NotFound",
    "Forbidden",
]


class QueueError(Exception):
    """Base class for all errors raised by the coordinator."""

    default_message: str = "Queue command failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class MalformedCommand(QueueError):
    """Missing or invalid command arguments. The message is a usage hint."""

    default_message = "Invalid command. Try `queue help`."


class NotFound(QueueError):
    """The referenced queue id does not exist."""

    default_message = "Queue not found."

    def __init__(self, queue_id: int | None = None, message: str | None = None) -> None:
        super().__init__(message)
        self.queue_id = queue_id


class Forbidden(QueueError):
    """The invoking user may not perform this mutation."""

    default_message = "Your tag was not found in the queue."
