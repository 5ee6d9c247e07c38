"""Prefix index over known command names."""

from __future__ import annotations

import logging
import time
from typing import Iterable, Optional

from .errors import DuplicateEntry
from .logging import log_event
from .models import CommandEntry
from .time_utils import elapsed_ms


class TrieNode:
    """One character step; terminal nodes carry the command they spell."""

    __slots__ = ("children", "entry")

    def __init__(self) -> None:
        self.children: dict[str, TrieNode] = {}
        self.entry: Optional[CommandEntry] = None


class CommandIndex:
    """Immutable-after-build trie of command entries.

    The index is never mutated once built; a changed command list means a
    new index.
    """

    def __init__(self) -> None:
        self._root = TrieNode()
        self._size = 0

    @classmethod
    def build(cls, entries: Iterable[CommandEntry]) -> "CommandIndex":
        """Build an index, skipping (and logging) duplicate names."""
        started = time.perf_counter()
        index = cls()
        skipped = 0
        for entry in entries:
            try:
                index._insert(entry)
            except DuplicateEntry as e:
                skipped += 1
                log_event("duplicate_entry", level=logging.WARNING, command=e.name)
        log_event(
            "index_built",
            command_count=index._size,
            skipped=skipped,
            elapsed_ms=elapsed_ms(started, time.perf_counter()),
        )
        return index

    def _insert(self, entry: CommandEntry) -> None:
        node = self._root
        for char in entry.name:
            child = node.children.get(char)
            if child is None:
                child = TrieNode()
                node.children[char] = child
            node = child
        if node.entry is not None:
            raise DuplicateEntry(entry.name)
        node.entry = entry
        self._size += 1

    def __len__(self) -> int:
        return self._size

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def _find(self, prefix: str) -> Optional[TrieNode]:
        node = self._root
        for char in prefix:
            node = node.children.get(char)
            if node is None:
                return None
        return node

    def get(self, name: str) -> Optional[CommandEntry]:
        """Return the entry for an exact command name, if indexed."""
        node = self._find(name)
        return node.entry if node is not None else None

    def prefix_query(self, prefix: str) -> list[CommandEntry]:
        """Return entries whose name starts with prefix, lexicographically.

        Surrounding whitespace is trimmed; matching is case-sensitive.
        An empty prefix returns every entry.
        """
        node = self._find(prefix.strip())
        if node is None:
            return []

        results: list[CommandEntry] = []
        # Pre-order walk with children pushed in reverse so the smallest
        # character is popped first; a name sorts before its extensions.
        stack = [node]
        while stack:
            current = stack.pop()
            if current.entry is not None:
                results.append(current.entry)
            for char in sorted(current.children, reverse=True):
                stack.append(current.children[char])
        return results
