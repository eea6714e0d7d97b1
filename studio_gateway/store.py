"""Storage for rate-limit windows."""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock
from typing import Optional, Protocol


@dataclass
class RateLimitEntry:
    key: str
    window_start: float
    count: int = 0


class RateLimitStore(Protocol):
    """Anything that can hold one entry per key."""

    def get(self, key: str) -> Optional[RateLimitEntry]:
        ...

    def set(self, key: str, entry: RateLimitEntry) -> None:
        ...


class InMemoryRateLimitStore:
    """Thread-safe LRU-capped map of rate-limit entries.

    Entries live for the lifetime of the process. Once ``max_keys`` distinct
    keys are tracked, the least recently used one is dropped, which hands
    that client a fresh window on its next request. ``max_keys=0`` removes
    the cap.
    """

    def __init__(self, max_keys: int = 10_000) -> None:
        self._max_keys = max_keys
        self._store: "OrderedDict[str, RateLimitEntry]" = OrderedDict()
        self._lock = Lock()

    def get(self, key: str) -> Optional[RateLimitEntry]:
        with self._lock:
            entry = self._store.get(key)
            if entry is not None:
                self._store.move_to_end(key)
            return entry

    def set(self, key: str, entry: RateLimitEntry) -> None:
        with self._lock:
            self._store[key] = entry
            self._store.move_to_end(key)
            while self._max_keys > 0 and len(self._store) > self._max_keys:
                self._store.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store
