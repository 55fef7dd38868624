"""
Bounded LRU memo of redaction results.

Keys are SHA-256 digests of the input, never the input itself, so a heap
dump or debugger view of the cache cannot surface a secret. Values are
always redacted output.
"""
from __future__ import annotations

import hashlib
from collections import OrderedDict
from typing import Optional


DEFAULT_CAPACITY = 1000


def hash_input(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8", "surrogatepass")).hexdigest()


class RedactionCache:
    """In-memory LRU keyed by input digest. Cleared once per run."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: OrderedDict[str, str] = OrderedDict()

    def get(self, key: str) -> Optional[str]:
        value = self._entries.get(key)
        if value is not None:
            self._entries.move_to_end(key)
        return value

    def put(self, key: str, text: str) -> None:
        self._entries[key] = text
        self._entries.move_to_end(key)
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
