"""In-memory queue registry.

The registry is the only owner of queue state. It is constructed explicitly and
handed to the :class:`~review_queue.coordinator.engine.QueueLifecycleEngine`,
so every test and every app instance gets its own isolated registry.

Locking
=======
A single re-entrant lock guards both the entry map and the id counter. Each
public method takes it on its own; callers that need a multi-step critical
section (read, modify, check) wrap the steps in :meth:`QueueRegistry.locked`:

.. code-block:: python

    with registry.locked():
        entry = registry.get(queue_id)
        entry.tags.remove(tag)

The lock is always acquired through a ``with`` block so it is released on
every exit path, errors included. Nothing in this module performs I/O.
"""

from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Final, Iterator

from .errors import NotFound
from .model import QueueEntry

__all__: list[str] = ["QueueRegistry"]

_LOG: Final[logging.Logger] = logging.getLogger(__name__)


class QueueRegistry:
    """Mapping of queue id to :class:`QueueEntry` plus a monotonic id counter.

    Parameters
    ----------
    first_id : int
        First id handed out by :meth:`next_id` (default: 1)
    """

    def __init__(self, first_id: int = 1) -> None:
        if first_id < 0:
            raise ValueError("first_id must be non-negative")
        self._entries: Dict[int, QueueEntry] = {}
        self._next_id = first_id
        self._lock = threading.RLock()

    @contextmanager
    def locked(self) -> Iterator["QueueRegistry"]:
        """Hold the registry lock for the duration of the ``with`` block."""
        with self._lock:
            yield self

    def next_id(self) -> int:
        """Reserve and return the next identifier.

        Call it inside :meth:`locked` together with the matching
        :meth:`insert` so concurrent adds never observe the same id.
        """
        with self._lock:
            queue_id = self._next_id
            self._next_id += 1
            return queue_id

    def insert(self, entry: QueueEntry) -> None:
        """Store a new entry under its own id.

        Raises
        ------
        ValueError
            If the id is negative or already present
        """
        with self._lock:
            if entry.id < 0:
                raise ValueError(f"Queue id must be non-negative, got {entry.id}")
            if entry.id in self._entries:
                raise ValueError(f"Queue id {entry.id} already exists")
            self._entries[entry.id] = entry
            _LOG.debug(f"Inserted queue {entry.id}")

    def get(self, queue_id: int) -> QueueEntry:
        """Return the live entry for ``queue_id``.

        Raises
        ------
        NotFound
            If no entry has this id
        """
        with self._lock:
            try:
                return self._entries[queue_id]
            except KeyError:
                raise NotFound(queue_id) from None

    def remove(self, queue_id: int) -> QueueEntry:
        """Delete and return the entry for ``queue_id``.

        Raises
        ------
        NotFound
            If no entry has this id
        """
        with self._lock:
            try:
                entry = self._entries.pop(queue_id)
            except KeyError:
                raise NotFound(queue_id) from None
            _LOG.debug(f"Removed queue {queue_id}")
            return entry

    def for_each(self, fn: Callable[[QueueEntry], None]) -> None:
        """Call ``fn`` for every entry, holding the lock for the whole traversal.

        Iteration order is unspecified. ``fn`` must not perform blocking I/O.
        """
        with self._lock:
            for entry in list(self._entries.values()):
                fn(entry)

    def snapshot(self) -> list[QueueEntry]:
        """Return copies of all entries sorted by id, taken under the lock."""
        entries: list[QueueEntry] = []
        self.for_each(lambda entry: entries.append(copy.deepcopy(entry)))
        entries.sort(key=lambda entry: entry.id)
        return entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, queue_id: object) -> bool:
        with self._lock:
            return queue_id in self._entries
