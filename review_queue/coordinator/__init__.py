"""Review queue coordinator.

Command parsing, the in-memory queue registry and the lifecycle engine that
applies chat commands to it. Nothing in this package does I/O.
"""

from .engine import HELP_TEXT, NO_QUEUES_TEXT, QueueLifecycleEngine
from .errors import Forbidden, MalformedCommand, NotFound, QueueError
from .model import Command, QueueEntry, mention
from .parser import DEFAULT_PREFIX, VERBS, parse_command
from .registry import QueueRegistry

__all__ = [
    "Command",
    "DEFAULT_PREFIX",
    "Forbidden",
    "HELP_TEXT",
    "MalformedCommand",
    "NO_QUEUES_TEXT",
    "NotFound",
    "QueueEntry",
    "QueueError",
    "QueueLifecycleEngine",
    "QueueRegistry",
    "VERBS",
    "mention",
    "parse_command",
]
