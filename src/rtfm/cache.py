"""Capacity-bounded LRU cache of parsed documents."""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

from .constants import CACHE_CAPACITY
from .logging import key_fields, log_event
from .models import DocumentKey, ParsedDocument


@dataclass
class CacheEntry:
    key: DocumentKey
    document: ParsedDocument
    last_used: int


class DocumentCache:
    """LRU cache keyed by DocumentKey.

    Recency is a logical clock bumped on every read and write. Entries are
    kept in recency order, so the first entry is always the eviction
    candidate.
    """

    def __init__(self, capacity: int = CACHE_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._entries: OrderedDict[DocumentKey, CacheEntry] = OrderedDict()
        self._clock = 0
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def _tick(self) -> int:
        self._clock += 1
        return self._clock

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """Membership check; does not touch recency."""
        return key in self._entries

    def keys(self) -> list[DocumentKey]:
        """Keys from least to most recently used."""
        return list(self._entries)

    def get(self, key: DocumentKey) -> Optional[ParsedDocument]:
        """Return the cached document and mark it most recently used."""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        entry.last_used = self._tick()
        self._entries.move_to_end(key)
        self.hits += 1
        return entry.document

    def put(self, key: DocumentKey, document: ParsedDocument) -> list[DocumentKey]:
        """Insert or replace a document, evicting LRU entries over capacity.

        Returns:
            Keys evicted by this insertion, oldest first
        """
        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = CacheEntry(key, document, self._tick())
        else:
            entry.document = document
            entry.last_used = self._tick()
            self._entries.move_to_end(key)

        evicted: list[DocumentKey] = []
        while len(self._entries) > self.capacity:
            old_key, _ = self._entries.popitem(last=False)
            self.evictions += 1
            evicted.append(old_key)
            log_event(
                "cache_evict",
                level=logging.DEBUG,
                cache_size=len(self._entries),
                **key_fields(old_key),
            )
        return evicted

    def clear(self) -> None:
        self._entries.clear()
