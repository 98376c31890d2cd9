"""Submission ledger interfaces.

The gate depends on this abstraction (not the concrete implementation)
so the storage backend can be swapped later (e.g., Redis) with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a ledger check.

    Attributes:
        allowed: Whether another submission fits in the window.
        limit: Max submissions per window.
        remaining: Remaining submissions in the current window (0 when blocked).
        retry_after_seconds: Seconds until the oldest in-window entry expires
            when blocked, otherwise None.
    """

    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int | None


class AbstractSubmissionLedger(ABC):
    """Per-client record of recent submission timestamps."""

    @property
    @abstractmethod
    def limit(self) -> int:
        """Max submissions per window."""
        raise NotImplementedError

    @property
    @abstractmethod
    def window_seconds(self) -> float:
        """Rolling window size in seconds."""
        raise NotImplementedError

    @abstractmethod
    def recent(self, key: str, now: float) -> list[float]:
        """Return the key's timestamps that fall within the window of ``now``.

        Stale entries are pruned from storage as a side effect. Introspection
        hook for operators and tests; admission goes through ``check`` and
        ``try_reserve``.
        """
        raise NotImplementedError

    @abstractmethod
    def check(self, key: str, now: float) -> RateLimitResult:
        """Report whether ``key`` may submit at ``now`` without mutating counts."""
        raise NotImplementedError

    @abstractmethod
    def try_reserve(self, key: str, now: float) -> RateLimitResult:
        """Atomically check and, if allowed, append ``now`` for ``key``."""
        raise NotImplementedError

    @abstractmethod
    def record(self, key: str, now: float) -> None:
        """Append ``now`` to the key's timestamps unconditionally."""
        raise NotImplementedError

    @abstractmethod
    def release(self, key: str, timestamp: float) -> bool:
        """Remove one previously recorded ``timestamp`` for ``key``.

        Returns:
            True if an entry was removed.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep(self, now: float) -> int:
        """Prune stale entries for every key, dropping keys left empty.

        Returns:
            Number of keys removed.
        """
        raise NotImplementedError

    @abstractmethod
    def __len__(self) -> int:
        """Number of tracked keys."""
        raise NotImplementedError
