"""Date windows, rankings and summaries over stored poop records."""

import datetime
import enum
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import crud
from models import PoopType


class Window(enum.Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL_TIME = "all_time"


Bounds = Tuple[Optional[datetime.datetime], Optional[datetime.datetime]]


def window_bounds(window: Window, now: datetime.datetime) -> Bounds:
    """Half-open [start, end) range of a window around now; (None, None) for all time.

    Weeks run Monday to Sunday (ISO); months are calendar months.
    """
    midnight = datetime.datetime.combine(now.date(), datetime.time.min)
    if window is Window.TODAY:
        return midnight, midnight + datetime.timedelta(days=1)
    if window is Window.WEEK:
        start = midnight - datetime.timedelta(days=now.weekday())
        return start, start + datetime.timedelta(days=7)
    if window is Window.MONTH:
        start = midnight.replace(day=1)
        if start.month == 12:
            end = start.replace(year=start.year + 1, month=1)
        else:
            end = start.replace(month=start.month + 1)
        return start, end
    return None, None


def _filled(counts: Dict[PoopType, int]) -> Dict[PoopType, int]:
    return {poop_type: counts.get(poop_type, 0) for poop_type in PoopType}


@dataclass
class CategoryCounts:
    total: int = 0
    by_category: Dict[PoopType, int] = field(default_factory=lambda: _filled({}))

    @classmethod
    def from_counts(cls, counts: Dict[PoopType, int]) -> "CategoryCounts":
        return cls(total=sum(counts.values()), by_category=_filled(counts))


@dataclass
class RankEntry:
    user_id: str
    display_name: str
    total_count: int
    category_counts: Dict[PoopType, int]


@dataclass
class Summary:
    today: CategoryCounts
    week: CategoryCounts
    month: CategoryCounts
    total: CategoryCounts
    daily_average: int


@dataclass
class GroupSummary:
    week: CategoryCounts
    month: CategoryCounts
    total: CategoryCounts


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def daily_average(total: int, first_record: Optional[datetime.datetime], now: datetime.datetime) -> int:
    """Average records per day since the first one, counting today as day one."""
    if not total or first_record is None:
        return 0
    days = max((now - first_record).days, 0) + 1
    return round_half_up(total / days)


def rank(group_id: str, window: Window, now: Optional[datetime.datetime] = None) -> List[RankEntry]:
    """Users of a group ordered by record count within the window, highest first.

    Equal counts keep the order in which users first recorded inside the window.
    """
    start, end = window_bounds(window, now or datetime.datetime.now())
    rows = crud.count_by_user(group_id, start, end)
    rows.sort(key=lambda item: (-sum(item["counts"].values()), item["first_id"]))
    return [
        RankEntry(
            user_id=item["user_id"],
            display_name=item["user_name"],
            total_count=sum(item["counts"].values()),
            category_counts=_filled(item["counts"]),
        )
        for item in rows
    ]


def _counts(window: Window, now: datetime.datetime, group_id: Optional[str], user_id: Optional[str] = None) -> CategoryCounts:
    start, end = window_bounds(window, now)
    return CategoryCounts.from_counts(crud.count_by_type(group_id, user_id, start, end))


def summarize(user_id: str, group_id: Optional[str], now: Optional[datetime.datetime] = None) -> Summary:
    """Personal counts per window. Without a group, every chat of the user is included."""
    now = now or datetime.datetime.now()
    total = _counts(Window.ALL_TIME, now, group_id, user_id)
    return Summary(
        today=_counts(Window.TODAY, now, group_id, user_id),
        week=_counts(Window.WEEK, now, group_id, user_id),
        month=_counts(Window.MONTH, now, group_id, user_id),
        total=total,
        daily_average=daily_average(total.total, crud.first_record_date(user_id, group_id), now),
    )


def group_summary(group_id: str, now: Optional[datetime.datetime] = None) -> GroupSummary:
    now = now or datetime.datetime.now()
    return GroupSummary(
        week=_counts(Window.WEEK, now, group_id),
        month=_counts(Window.MONTH, now, group_id),
        total=_counts(Window.ALL_TIME, now, group_id),
    )


def top_user(group_id: str, now: Optional[datetime.datetime] = None) -> Optional[RankEntry]:
    """Most active user of the group in the current week, or None without records."""
    ranking = rank(group_id, Window.WEEK, now)
    return ranking[0] if ranking else None
