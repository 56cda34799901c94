"""Queue lifecycle engine.

Implements every queue verb against an injected :class:`QueueRegistry` and
renders the reply text posted back to the channel.

Entry state is derived, never stored as a single status field:

- **Open**: tags left, not in review
- **In review**: ``in_review`` is set, whatever the tags
- **Approved**: no tags left

``review``/``update`` toggle ``in_review``; ``approve`` only ever shrinks
``tags``. Running out of tags does not clear ``in_review`` and does not
remove the entry.

Quick Example
=============
.. code-block:: python

    from review_queue.coordinator import QueueLifecycleEngine, QueueRegistry

    engine = QueueLifecycleEngine(QueueRegistry())
    engine.add("Fix-bug", "https://git.example.com/mr/1", ["<@U1>"], owner="U2")
    print(engine.approve(1, "<@U1>"))
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Final, Optional, Sequence

from .errors import Forbidden, MalformedCommand
from .model import Command, QueueEntry, mention
from .registry import QueueRegistry

__all__: list[str] = [
    "QueueLifecycleEngine",
    "HELP_TEXT",
    "NO_QUEUES_TEXT",
]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)

NO_QUEUES_TEXT: Final[str] = "No queues available."
NO_REPORT_TEXT: Final[str] = "No queues found."

HELP_TEXT: Final[str] = (
    "Here are the available queue commands:\n"
    "- `queue add <title> <link> @tag @tag...`: Adds a queue with a title, link, and optional tags (user mentions)\n"
    "  Example: `queue add New-Feature https://example.com @user1 @user2`\n"
    "- `queue list`: Lists all queues\n"
    "- `queue remove <queueID>`: Removes a queue by ID\n"
    "- `queue approve <queueID>`: Approves a queue by ID (removes your tag)\n"
    "- `queue review <queueID>`: Marks a queue as under review\n"
    "- `queue update <queueID>`: Marks a queue as updated and no longer in review\n"
    "- `queue report`: Shows the status and age of every queue\n"
    "- `queue help`: Displays this help message"
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _format_age(delta: timedelta) -> str:
    minutes = max(int(delta.total_seconds()) // 60, 0)
    days, minutes = divmod(minutes, 60 * 24)
    hours, minutes = divmod(minutes, 60)
    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def _render_tags(tags: Sequence[str]) -> str:
    return ", ".join(tags) if tags else "none"


class QueueLifecycleEngine:
    """Apply queue commands to a registry and produce reply text.

    All methods are synchronous and thread safe. Each read-modify-write runs
    inside one :meth:`QueueRegistry.locked` section, and none of them perform
    I/O, so the caller is free to deliver the reply once they return.

    Parameters
    ----------
    registry : QueueRegistry
        The registry owning the queue state
    clock : Callable[[], datetime] | None
        Source of the current time, used for creation stamps and reports
    """

    def __init__(self, registry: QueueRegistry, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._registry = registry
        self._clock = clock or _utcnow

    @property
    def registry(self) -> QueueRegistry:
        return self._registry

    def execute(self, command: Command, user: str, channel: str) -> str:
        """Dispatch a parsed command.

        Parameters
        ----------
        command : Command
            Output of :func:`~review_queue.coordinator.parser.parse_command`
        user : str
            Slack user id of the invoking member
        channel : str
            Channel the command came from. Used for logging only; all
            channels share one registry.

        Returns
        -------
        str
            Reply text

        Raises
        ------
        MalformedCommand, NotFound, Forbidden
            See :mod:`review_queue.coordinator.errors`
        """
        _LOG.info(f"Executing '{command.verb}' from user {user} in channel {channel}")
        match command.verb:
            case "add":
                title, link, *tags = command.args
                return self.add(title, link, tags, owner=user)
            case "list":
                return self.list()
            case "remove":
                return self.remove(command.queue_id)
            case "approve":
                return self.approve(command.queue_id, mention(user))
            case "review":
                return self.review(command.queue_id)
            case "update":
                return self.update(command.queue_id)
            case "report":
                return self.report()
            case "help":
                return self.help()
            case _:
                raise MalformedCommand(f"Unknown command: {command.verb}")

    def add(self, title: str, link: str, tags: Sequence[str], owner: str) -> str:
        if not title or not link:
            raise MalformedCommand("Usage: queue add <title> <MR link> @tag @tag")

        with self._registry.locked():
            entry = QueueEntry(
                id=self._registry.next_id(),
                title=title,
                link=link,
                tags=[tag for tag in tags if tag],
                owner=owner,
                created_at=self._clock(),
            )
            self._registry.insert(entry)

        _LOG.info(f"Queue {entry.id} added by {owner} with tags {entry.tags}")
        return (
            f"Queue added: *{entry.title}* (ID: {entry.id})\n"
            f"MR Link: {entry.link}\n"
            f"Tags: {_render_tags(entry.tags)}"
        )

    def list(self) -> str:
        entries = self._registry.snapshot()
        if not entries:
            return NO_QUEUES_TEXT

        lines = []
        for entry in entries:
            if entry.in_review:
                who = f"Owner: {mention(entry.owner)}"
            else:
                who = f"Tags: {_render_tags(entry.tags)}"
            lines.append(f"ID: {entry.id} | Title: {entry.title} | MR: {entry.link} | {who}")
        return "\n".join(lines)

    def remove(self, queue_id: int) -> str:
        self._registry.remove(queue_id)
        _LOG.info(f"Queue {queue_id} removed")
        return f"Queue {queue_id} removed."

    def approve(self, queue_id: int, approving_tag: str) -> str:
        """Remove the first tag equal to ``approving_tag``.

        An entry without tags left yields a completion notice rather than an
        error. A tag that is not present raises :class:`Forbidden` and leaves
        the entry untouched.
        """
        with self._registry.locked():
            entry = self._registry.get(queue_id)
            if not entry.tags:
                message = f"Queue {queue_id} completed; no tags left."
            else:
                try:
                    entry.tags.remove(approving_tag)
                except ValueError:
                    _LOG.info(f"Rejected approval of queue {queue_id} by {approving_tag}: not tagged")
                    raise Forbidden() from None
                _LOG.info(f"Queue {queue_id} approved by {approving_tag}, {len(entry.tags)} tag(s) left")
                if entry.tags:
                    message = f"Queue {queue_id} approved and tag removed."
                else:
                    message = f"Queue {queue_id} approved and tag removed. All tags approved."
            return f"{message}\n\n{self.list()}"

    def review(self, queue_id: int) -> str:
        with self._registry.locked():
            self._registry.get(queue_id).in_review = True
            _LOG.info(f"Queue {queue_id} is now in review")
            return f"Queue {queue_id} is now in review.\n\n{self.list()}"

    def update(self, queue_id: int) -> str:
        with self._registry.locked():
            self._registry.get(queue_id).in_review = False
            _LOG.info(f"Queue {queue_id} updated, no longer in review")
            return f"Queue {queue_id} has been updated and is no longer in review.\n\n{self.list()}"

    def report(self) -> str:
        entries = self._registry.snapshot()
        if not entries:
            return NO_REPORT_TEXT

        now = self._clock()
        lines = ["Queue Report:"]
        for entry in entries:
            lines.append(
                f"ID: {entry.id} | Title: {entry.title} | Status: {entry.status} | "
                f"Tags left: {len(entry.tags)} | Age: {_format_age(now - entry.created_at)}"
            )
        return "\n".join(lines)

    @staticmethod
    def help() -> str:
        return HELP_TEXT
