"""Per-session mutual exclusion for chunk intake and concatenation."""

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator


class SessionLockRegistry:
    """
    Hands out one lock per upload session key.

    Locks are reference counted and dropped once no caller holds or waits on
    them, so the registry does not grow with the number of sessions seen.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._users: Dict[str, int] = {}

    @contextmanager
    def hold(self, session_key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(session_key, threading.Lock())
            self._users[session_key] = self._users.get(session_key, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._users[session_key] -= 1
                if self._users[session_key] == 0:
                    del self._users[session_key]
                    del self._locks[session_key]

    def active_sessions(self) -> int:
        with self._guard:
            return len(self._locks)


def session_lock_key(chunk_dir: Path, base_name: str) -> str:
    """Key shared by everything that touches the artifacts of one session."""
    return str(Path(chunk_dir) / base_name)
