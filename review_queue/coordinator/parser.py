"""Turn raw chat text into a :class:`Command`.

Accepted shapes (whitespace separated, verb is case-insensitive)::

    [<@BOT>] [queue] add <title> <link> [@tag ...]
    [<@BOT>] [queue] list | report | help
    [<@BOT>] [queue] remove | approve | review | update <id>

The prefix token (``queue`` by default) is mandatory for channel messages so
that ordinary conversation is not mistaken for a command, and optional for the
slash-command style endpoint.
"""

from __future__ import annotations

import re
from typing import Final, Optional

from .errors import MalformedCommand
from .model import Command

__all__: list[str] = [
    "VERBS",
    "DEFAULT_PREFIX",
    "USAGE",
    "parse_command",
]

DEFAULT_PREFIX: Final[str] = "queue"

VERBS: Final[frozenset[str]] = frozenset({"add", "list", "remove", "approve", "review", "update", "help", "report"})

_ID_VERBS: Final[frozenset[str]] = frozenset({"remove", "approve", "review", "update"})

_MENTION_PREFIX: Final[re.Pattern[str]] = re.compile(r"^<@[A-Z0-9]+(?:\|[^>]*)?>$")

USAGE: Final[dict[str, str]] = {
    "add": "Usage: queue add <title> <MR link> @tag @tag",
    "remove": "Usage: queue remove <id>",
    "approve": "Usage: queue approve <id>",
    "review": "Usage: queue review <id>",
    "update": "Usage: queue update <id>",
}


def parse_command(
    text: str,
    prefix: str = DEFAULT_PREFIX,
    require_prefix: bool = True,
) -> Optional[Command]:
    """Parse a chat message into a command.

    Parameters
    ----------
    text : str
        Raw message text
    prefix : str
        Command prefix token, compared case-insensitively
    require_prefix : bool
        When True, text that does not start with ``prefix`` is not a command

    Returns
    -------
    Optional[Command]
        The parsed command, or None if the text is not a queue command

    Raises
    ------
    MalformedCommand
        If the verb is known but its required arguments are missing or invalid
    """
    tokens = text.split()
    if tokens and _MENTION_PREFIX.match(tokens[0]):
        tokens = tokens[1:]

    if tokens and tokens[0].lower() == prefix.lower():
        tokens = tokens[1:]
    elif require_prefix:
        return None

    if not tokens:
        return None

    verb, args = tokens[0].lower(), tokens[1:]
    if verb not in VERBS:
        return None

    if verb == "add" and len(args) < 2:
        raise MalformedCommand(USAGE["add"])

    if verb in _ID_VERBS:
        if not args:
            raise MalformedCommand(USAGE[verb])
        # ASCII digits only; int() would also accept signs and underscores
        if not (args[0].isascii() and args[0].isdigit()):
            raise MalformedCommand("Invalid queue ID.")

    return Command(verb=verb, args=tuple(args))
