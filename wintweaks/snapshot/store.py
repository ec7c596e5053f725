"""
BackupStore - Captures pre-change state for restore.

Holds the state observed the first time each resource identity is touched in
an engine session. Records are write-once: later applies read the record but
never replace it, so a restore always returns to the true pre-run state.

Nothing here is persisted; a store lives for one run of the engine.
"""

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Optional
from dataclasses import dataclass, field


@dataclass(frozen=True)
class BackupRecord:
    """State of one resource at first touch."""
    identity: str
    state: Any
    captured_at: datetime = field(default_factory=datetime.now)


class BackupStore:
    """
    Write-once mapping of resource identity to observed state.

    Identities are compared case-insensitively.
    """

    def __init__(self, kind: str = ""):
        self.kind = kind
        self._records: Dict[str, BackupRecord] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(identity: str) -> str:
        return identity.casefold()

    def try_get(self, identity: str) -> Optional[Any]:
        """Return the backed-up state, or None if identity was never captured."""
        record = self.get_record(identity)
        return record.state if record else None

    def get_record(self, identity: str) -> Optional[BackupRecord]:
        with self._lock:
            return self._records.get(self._key(identity))

    def contains(self, identity: str) -> bool:
        return self.get_record(identity) is not None

    def set_if_absent(self, identity: str, state: Any) -> bool:
        """
        Record state for identity unless a record already exists.

        Returns:
            True if the record was written, False if one was already present
        """
        key = self._key(identity)
        with self._lock:
            if key in self._records:
                return False
            self._records[key] = BackupRecord(identity=identity, state=state)
            return True

    def clear(self):
        """Drop every record (start of a new independent session)."""
        with self._lock:
            self._records.clear()

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def __len__(self) -> int:
        return self.count

    def snapshot(self) -> Dict[str, Any]:
        """Copy of identity -> state, for display and diagnostics."""
        with self._lock:
            return {r.identity: r.state for r in self._records.values()}


class IdentityLocks:
    """
    One mutex per resource identity.

    Serializes the probe/backup/mutate sequence for the same identity when
    entries run on several threads.
    """

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _get(self, identity: str) -> threading.Lock:
        key = identity.casefold()
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, identity: str) -> Iterator[None]:
        lock = self._get(identity)
        with lock:
            yield
