"""Fixed-window per-client rate limiter shared by every proxy endpoint.

Each key gets a counter that resets once ``window_ms`` has elapsed since the
window opened. Memory and time per check are O(1). The price is the usual
fixed-window boundary effect: a client can spend its full quota at the end
of one window and again right after rollover, so up to ``2 * limit``
requests may land within a short span. A sliding-window or token-bucket
limiter can replace this one behind the same ``check`` signature.

Check-and-increment runs under a single lock. FastAPI dispatches sync
dependencies on a threadpool, so unsynchronised access could admit two
requests for the last free slot. A store shared between processes would
need its own atomic increment; the lock only covers this process.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional

from studio_gateway.store import InMemoryRateLimitStore, RateLimitEntry, RateLimitStore
from studio_gateway.utils.client import rate_limit_key
from studio_gateway.utils.clock import Clock, SystemClock


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    retry_after: Optional[int] = None


@dataclass(frozen=True)
class RateLimitPolicy:
    """Quota for one endpoint category."""

    prefix: str
    limit: int
    window_ms: int = 60_000

    def __post_init__(self) -> None:
        if self.limit <= 0:
            raise ValueError("limit must be positive")
        if self.window_ms <= 0:
            raise ValueError("window_ms must be positive")


ENDPOINT_POLICIES: Dict[str, RateLimitPolicy] = {
    "chat": RateLimitPolicy(prefix="chat", limit=30),
    "edit-image": RateLimitPolicy(prefix="edit", limit=10),
    "generate-image": RateLimitPolicy(prefix="generate", limit=10),
    "enhance-prompt": RateLimitPolicy(prefix="enhance", limit=20),
    "image-to-prompt": RateLimitPolicy(prefix="imgprompt", limit=15),
    "remix-images": RateLimitPolicy(prefix="remix", limit=10),
}


class FixedWindowRateLimiter:
    """Counts requests per key inside fixed windows."""

    def __init__(
        self,
        store: Optional[RateLimitStore] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._store = store if store is not None else InMemoryRateLimitStore()
        self._clock = clock or SystemClock()
        self._lock = Lock()

    @property
    def store(self) -> RateLimitStore:
        return self._store

    def check(self, key: str, limit: int, window_ms: int) -> RateLimitResult:
        """Record one attempt for ``key`` and decide whether it may proceed.

        A rejected attempt leaves the counter untouched. ``retry_after`` is
        the whole number of seconds until the current window closes.
        """

        with self._lock:
            now = self._clock.now_ms()
            entry = self._store.get(key)
            if entry is None or now - entry.window_start >= window_ms:
                entry = RateLimitEntry(key=key, window_start=now, count=0)

            if entry.count >= limit:
                self._store.set(key, entry)
                retry_after = math.ceil((entry.window_start + window_ms - now) / 1000)
                return RateLimitResult(allowed=False, retry_after=retry_after)

            entry.count += 1
            self._store.set(key, entry)
            return RateLimitResult(allowed=True)

    def check_policy(self, policy: RateLimitPolicy, client_id: str) -> RateLimitResult:
        """Check ``client_id`` against an endpoint policy."""

        return self.check(rate_limit_key(policy.prefix, client_id), policy.limit, policy.window_ms)


_default_limiter = FixedWindowRateLimiter()


def check_rate_limit(key: str, limit: int, window_ms: int) -> RateLimitResult:
    """Check ``key`` against the process-wide limiter."""

    return _default_limiter.check(key, limit, window_ms)
