"""Event filtering and cross-process serialization."""

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Protocol

DECISIVE_STATUSES = frozenset({"up", "down", "vpn-up", "vpn-down"})


class ExclusiveLock(Protocol):
    """Non-blocking exclusive lock shared by every daemon process."""

    def try_acquire(self) -> bool:
        """Acquire the lock if free and return whether it was acquired."""

    def release(self) -> None:
        """Release the lock if held."""


@dataclass
class TriggerGate:
    """Admits decisive events and serializes the cycles that follow them."""

    lock: ExclusiveLock
    settle_delay_seconds: float = 1.0
    sleep: Callable[[float], None] = time.sleep

    def admit(self, status: str) -> bool:
        """Return True when the status should trigger re-evaluation."""
        return status in DECISIVE_STATUSES

    @contextmanager
    def hold(self) -> Iterator[bool]:
        """Hold the lock for the rest of a cycle.

        Yields False immediately when another cycle holds the lock. Otherwise
        waits the settle delay while holding it and yields True.
        """
        if not self.lock.try_acquire():
            yield False
            return
        try:
            if self.settle_delay_seconds > 0:
                self.sleep(self.settle_delay_seconds)
            yield True
        finally:
            self.lock.release()
