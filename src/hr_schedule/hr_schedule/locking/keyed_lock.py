from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterator, Optional

from ..core.constants import MAX_LOCK_TIMEOUT_SECONDS
from ..core.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class KeyedLock:
    """One exclusive section per key (employee id); no global mutex.

    Entries are reference counted and dropped once no thread holds or waits
    on them, so the registry does not grow with the number of employees seen.
    """

    def __init__(self, *, default_timeout: float = 5.0, max_timeout: float = MAX_LOCK_TIMEOUT_SECONDS):
        self._registry_lock = threading.Lock()
        self._entries: Dict[Hashable, _Entry] = {}
        self._default_timeout = float(default_timeout)
        self._max_timeout = min(float(max_timeout), threading.TIMEOUT_MAX)

    def _checkout(self, key: Hashable) -> _Entry:
        with self._registry_lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = _Entry()
                self._entries[key] = entry
            entry.users += 1
            return entry

    def _checkin(self, key: Hashable, entry: _Entry) -> None:
        with self._registry_lock:
            entry.users -= 1
            if entry.users == 0 and self._entries.get(key) is entry:
                del self._entries[key]

    @contextmanager
    def hold(self, key: Hashable, *, timeout: Optional[float] = None) -> Iterator[None]:
        """Hold the section for ``key``; raise LockTimeoutError if not acquired in time.

        The wait is clamped to ``[0, max_timeout]``; NaN counts as zero.
        """
        wait = self._default_timeout if timeout is None else float(timeout)
        wait = min(wait, self._max_timeout) if wait > 0 else 0.0
        entry = self._checkout(key)
        try:
            acquired = entry.lock.acquire(timeout=wait)
            if not acquired:
                logger.warning("employee_lock_timeout", extra={"lock_key": str(key), "timeout_s": wait})
                raise LockTimeoutError(f"Could not acquire exclusive section for {key!r} within {wait:.2f}s")
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            self._checkin(key, entry)

    def active_keys(self) -> int:
        with self._registry_lock:
            return len(self._entries)
