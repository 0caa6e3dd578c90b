"""
In-process sliding-window rate limiting.

Counters live in this process only, so each worker enforces its own
limit. Keys whose window has fully passed are swept out at most once per
``SWEEP_INTERVAL_SECONDS`` so the table does not grow with every client
address ever seen.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Deque, Dict, Optional

from fastapi import HTTPException, status

SWEEP_INTERVAL_SECONDS = 60


def _drop_expired(hits: Deque[float], window_seconds: int, now: float) -> None:
    while hits and now - hits[0] >= window_seconds:
        hits.popleft()


class InMemoryRateLimiter:
    """Sliding-window hit counter keyed by an arbitrary string."""

    def __init__(self) -> None:
        self._hits: Dict[str, Deque[float]] = {}
        self._windows: Dict[str, int] = {}
        self._last_sweep: Optional[float] = None

    def __len__(self) -> int:
        return len(self._hits)

    def hit(
        self,
        *,
        key: str,
        limit: int,
        window_seconds: int,
        detail: str = "Too many requests",
        now: Optional[float] = None,
    ) -> None:
        """Count one hit for ``key``.

        Raises:
            HTTPException: 429 when ``key`` already used ``limit`` hits within the window
        """
        current = time.monotonic() if now is None else now
        self.sweep(current)

        hits = self._hits.setdefault(key, deque())
        self._windows[key] = window_seconds
        _drop_expired(hits, window_seconds, current)
        if len(hits) >= limit:
            retry_after = max(1, int(window_seconds - (current - hits[0])))
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=detail,
                headers={"Retry-After": str(retry_after)},
            )
        hits.append(current)

    def sweep(self, now: Optional[float] = None, force: bool = False) -> int:
        """Forget keys with no hits left inside their window.

        Returns:
            Number of keys removed
        """
        current = time.monotonic() if now is None else now
        if not force and self._last_sweep is not None and current - self._last_sweep < SWEEP_INTERVAL_SECONDS:
            return 0
        self._last_sweep = current

        removed = 0
        for key in list(self._hits):
            hits = self._hits[key]
            _drop_expired(hits, self._windows.get(key, 0), current)
            if not hits:
                del self._hits[key]
                self._windows.pop(key, None)
                removed += 1
        return removed

    def reset(self) -> None:
        self._hits.clear()
        self._windows.clear()
        self._last_sweep = None


limiter = InMemoryRateLimiter()
