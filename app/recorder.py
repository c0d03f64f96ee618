import datetime
from dataclasses import dataclass
from typing import Optional, Union

from loguru import logger

import crud
from aggregator import Window, window_bounds
from models import PoopType
from ratelimit import RecordThrottle, record_key


@dataclass(frozen=True)
class Recorded:
    today_count: int
    total_count: int


@dataclass(frozen=True)
class RateLimited:
    ttl_hours: int


RecordResult = Union[Recorded, RateLimited]


class Recorder:
    """Persists record commands, at most one per user and chat per TTL window."""

    def __init__(self, throttle: RecordThrottle, ttl_hours: int = 1):
        self.throttle = throttle
        self.ttl_hours = ttl_hours

    def record(
        self,
        user_id: str,
        group_id: Optional[str],
        display_name: str,
        category: PoopType = PoopType.GOOD,
        now: Optional[datetime.datetime] = None,
    ) -> RecordResult:
        key = record_key(user_id, group_id)
        if not self.throttle.acquire(key, datetime.timedelta(hours=self.ttl_hours)):
            logger.info("Record rate limited for {}", key)
            return RateLimited(self.ttl_hours)

        now = now or datetime.datetime.now()
        try:
            crud.create_record(user_id, group_id, display_name, category, now)
        except Exception:
            self.throttle.release(key)
            raise

        start, end = window_bounds(Window.TODAY, now)
        today_count = crud.count_records(group_id, user_id, start, end, exact_group=True)
        total_count = crud.count_records(group_id, user_id, exact_group=True)
        logger.info("Recorded {} for {} (today={}, total={})", category.name, key, today_count, total_count)
        return Recorded(today_count, total_count)
