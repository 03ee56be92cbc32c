"""Priority-ordered handler stack for a single phase."""

from __future__ import annotations

import itertools
from enum import IntEnum
from typing import List, Tuple

from phaselayer.http import Middleware


class Priority(IntEnum):
    """Named execution levels within a phase. Lower values run first."""

    HEAD = 0
    NORMAL = 1
    TAIL = 2


class PriorityStack:
    """Middleware for one phase, ordered by priority then insertion.

    :meth:`push` only ever appends; :meth:`join` projects the entries into
    execution order with a stable sort, so handlers sharing a priority keep
    the order in which they were registered.
    """

    def __init__(self) -> None:
        self._entries: List[Tuple[int, int, Middleware]] = []
        self._seq = itertools.count()

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, priority: int, handler: Middleware) -> None:
        self._entries.append((int(priority), next(self._seq), handler))

    def copy(self) -> "PriorityStack":
        """Return an independent stack holding the same entries."""
        clone = PriorityStack()
        clone._entries = list(self._entries)
        clone._seq = itertools.count(next(self._seq))
        return clone

    def join(self) -> List[Middleware]:
        """Return a fresh list of handlers in execution order."""
        ordered = sorted(self._entries, key=lambda entry: (entry[0], entry[1]))
        return [handler for _, _, handler in ordered]
