"""Process-scoped exclusive lock using flock(2)."""

import fcntl
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO

from network_branding.services.gate import ExclusiveLock


@dataclass
class FlockLock(ExclusiveLock):
    """Non-blocking flock on a fixed path; the kernel drops it on process exit."""

    path: Path
    _handle: IO[str] | None = field(default=None, init=False, repr=False)

    def try_acquire(self) -> bool:
        """Acquire the lock without waiting."""
        if self._handle is not None:
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        handle = self.path.open("a+", encoding="utf-8")
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            handle.close()
            return False
        self._handle = handle
        return True

    def release(self) -> None:
        """Release the lock if this instance holds it."""
        if self._handle is None:
            return
        fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
        self._handle.close()
        self._handle = None
