from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

__all__: list[str] = [
    "QueueEntry",
    "Command",
    "mention",
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def mention(user_id: str) -> str:
    """Render a Slack user id the way Slack encodes a mention (``<@U123>``)."""
    return f"<@{user_id}>"


@dataclass(slots=True, kw_only=True)
class QueueEntry:
    """
    One review request tracked by the registry.

    :param id: identifier assigned by :meth:`QueueRegistry.next_id`
    :param title: display title
    :param link: merge request link, opaque to the bot
    :param tags: reviewer tags still required to approve, in the order given
    :param owner: Slack user id of the member who added the entry
    :param in_review: whether the owner flagged the entry for re-review.
        Tracked independently of ``tags``.
    :param created_at: creation time (UTC)
    """

    id: int
    title: str
    link: str
    tags: list[str] = field(default_factory=list)
    owner: str
    in_review: bool = False
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def approved(self) -> bool:
        return not self.tags

    @property
    def status(self) -> str:
        if self.approved:
            return "Approved"
        if self.in_review:
            return "In review"
        return "Open"


@dataclass(frozen=True, slots=True)
class Command:
    """
    A parsed chat command.

    :param verb: one of the verbs in :data:`review_queue.coordinator.parser.VERBS`
    :param args: positional arguments following the verb
    """

    verb: str
    args: tuple[str, ...] = ()

    @property
    def queue_id(self) -> int:
        """The integer id argument of id-based verbs.

        The parser guarantees it is present and numeric for those verbs.
        """
        return int(self.args[0])
