"""Process-wide expiring flags used to throttle record commands."""

import datetime
import threading
from typing import Callable, Dict, Optional


def record_key(user_id: str, group_id: Optional[str]) -> str:
    return f"poop_record_{user_id}_{group_id or 'none'}"


class RecordThrottle:
    """Key/value store where each value is the key's expiry time.

    acquire() is the only writer and does check-and-set under one lock, so two
    concurrent deliveries for the same key cannot both succeed.
    """

    def __init__(self, clock: Callable[[], datetime.datetime] = datetime.datetime.now):
        self._clock = clock
        self._expiry: Dict[str, datetime.datetime] = {}
        self._lock = threading.Lock()

    def _live(self, key: str, now: datetime.datetime) -> bool:
        expires_at = self._expiry.get(key)
        if expires_at is None:
            return False
        if expires_at <= now:
            del self._expiry[key]
            return False
        return True

    def acquire(self, key: str, ttl: datetime.timedelta) -> bool:
        """Set the flag unless a live one exists. Returns True when set."""
        with self._lock:
            now = self._clock()
            if self._live(key, now):
                return False
            self._expiry[key] = now + ttl
            return True

    def release(self, key: str) -> None:
        with self._lock:
            self._expiry.pop(key, None)
