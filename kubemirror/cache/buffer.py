"""Bootstrap buffer: holds an in-progress snapshot invisibly to readers."""

from __future__ import annotations

from typing import Generic, TypeVar

from kubemirror.models.entries import CacheEntry
from kubemirror.models.resources import Identity

E = TypeVar("E", bound=CacheEntry)


class BootstrapBuffer(Generic[E]):
    """Accumulates converted entries between ``init`` and ``init_done``.

    Only the owning synchronizer touches the buffer, so it carries no lock.
    A later item with the same identity replaces the earlier one.
    """

    def __init__(self) -> None:
        self._items: dict[Identity, E] = {}

    def __len__(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items = {}

    def add(self, entry: E) -> None:
        self._items[entry.identity] = entry

    def drain(self) -> list[E]:
        """Return the buffered entries and leave the buffer empty."""
        items = list(self._items.values())
        self._items = {}
        return items
