# ─────────────────────────────────────────────────────────────────────────────
# Rate Limiter — per-address fixed-window counter
# ─────────────────────────────────────────────────────────────────────────────
# State is process-local: every instance keeps its own counts and nothing
# survives a restart. Entries are never evicted, so memory grows with the
# number of distinct addresses seen. Running several instances behind a load
# balancer multiplies the effective limit; that deployment needs a shared
# counter store (e.g. Redis) behind the same admit() contract.
# ─────────────────────────────────────────────────────────────────────────────

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from slowapi.util import get_remote_address
from starlette.requests import Request


@dataclass
class RateLimitEntry:
    """Requests seen from one address in its current window."""

    count: int
    window_start: float


class FixedWindowRateLimiter:
    """Admits at most max_requests per key within each fixed window.

    A window opens on the first request from a key and resets entirely on the
    first request after window_seconds have elapsed. The clock is injectable
    so tests can move time deterministically.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 0:
            raise ValueError("max_requests must be >= 0")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        # Check, reset and increment must be one step under concurrent requests.
        self._lock = threading.Lock()

    def admit(self, key: str) -> bool:
        """Count a request from key. Returns False once the window budget is spent."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or now - entry.window_start > self.window_seconds:
                entry = RateLimitEntry(count=0, window_start=now)
                self._entries[key] = entry
            entry.count += 1
            return entry.count <= self.max_requests

    def retry_after(self, key: str) -> float:
        """Seconds until the current window for key ends (0 if none is open)."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return 0.0
            return max(0.0, entry.window_start + self.window_seconds - now)

    def entry(self, key: str) -> RateLimitEntry | None:
        """Snapshot of the entry for key."""
        with self._lock:
            entry = self._entries.get(key)
            return None if entry is None else RateLimitEntry(entry.count, entry.window_start)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def client_address(request: Request, trust_proxy_hops: int = 0) -> str:
    """Source address used as the rate-limit key.

    Behind trust_proxy_hops reverse proxies, each proxy appends the peer it
    saw to X-Forwarded-For, so the client is that many entries from the
    right. Anything further left is client-supplied and not trusted.
    """
    if trust_proxy_hops > 0:
        forwarded = request.headers.get("x-forwarded-for", "")
        hops = [part.strip() for part in forwarded.split(",") if part.strip()]
        if hops:
            return hops[max(0, len(hops) - trust_proxy_hops)]
    return get_remote_address(request) or "unknown"
