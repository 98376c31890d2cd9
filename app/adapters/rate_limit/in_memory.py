"""In-memory sliding-window submission ledger.

Notes:
- Per-process only: running multiple workers multiplies the effective limit,
  and state resets on restart.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import math
import threading

from app.adapters.rate_limit.base import AbstractSubmissionLedger, RateLimitResult


class InMemorySubmissionLedger(AbstractSubmissionLedger):
    """Ledger keeping an ordered list of epoch timestamps per client.

    A timestamp counts toward the limit while ``now - timestamp < window``.
    Lists are kept in insertion order, which is chronological as long as
    callers pass a non-decreasing ``now``.
    """

    def __init__(self, *, limit: int, window_seconds: float) -> None:
        """Initialize the ledger.

        Args:
            limit: Maximum number of submissions per window.
            window_seconds: Rolling window size in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = window_seconds
        self._lock = threading.RLock()
        self._timestamps_by_key: dict[str, list[float]] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _within_window(self, timestamps: list[float], now: float) -> list[float]:
        return [t for t in timestamps if now - t < self._window_seconds]

    def _prune_locked(self, key: str, now: float) -> list[float]:
        timestamps = self._timestamps_by_key.get(key)
        if not timestamps:
            return []
        filtered = self._within_window(timestamps, now)
        if filtered:
            self._timestamps_by_key[key] = filtered
        else:
            del self._timestamps_by_key[key]
        return filtered

    def _build_result(self, recent: list[float], now: float) -> RateLimitResult:
        remaining = max(0, self._limit - len(recent))
        if len(recent) < self._limit:
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=remaining,
                retry_after_seconds=None,
            )

        # The slot frees up once the oldest counted entry leaves the window
        oldest = recent[-self._limit]
        retry_after = max(1, int(math.ceil(oldest + self._window_seconds - now)))
        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=0,
            retry_after_seconds=retry_after,
        )

    def recent(self, key: str, now: float) -> list[float]:
        with self._lock:
            return list(self._prune_locked(key, now))

    def check(self, key: str, now: float) -> RateLimitResult:
        with self._lock:
            recent = self._prune_locked(key, now)
            return self._build_result(recent, now)

    def try_reserve(self, key: str, now: float) -> RateLimitResult:
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            recent = self._prune_locked(key, now)
            result = self._build_result(recent, now)
            if not result.allowed:
                return result
            self._timestamps_by_key[key] = [*recent, now]
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=max(0, result.remaining - 1),
                retry_after_seconds=None,
            )

    def record(self, key: str, now: float) -> None:
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            recent = self._prune_locked(key, now)
            self._timestamps_by_key[key] = [*recent, now]

    def release(self, key: str, timestamp: float) -> bool:
        with self._lock:
            timestamps = self._timestamps_by_key.get(key)
            if not timestamps or timestamp not in timestamps:
                return False
            # Drop the most recent matching entry
            idx = len(timestamps) - 1 - timestamps[::-1].index(timestamp)
            del timestamps[idx]
            if not timestamps:
                del self._timestamps_by_key[key]
            return True

    def sweep(self, now: float) -> int:
        removed = 0
        with self._lock:
            for key in list(self._timestamps_by_key):
                if not self._prune_locked(key, now):
                    removed += 1
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._timestamps_by_key)
