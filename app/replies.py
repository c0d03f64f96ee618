"""Text templates for every reply the bot sends."""

from typing import List

from aggregator import CategoryCounts, GroupSummary, RankEntry, Summary, Window
from models import PoopType

GROUP_ONLY_MESSAGE = "Please use this command in a group chat"
ONE_TO_ONE_ONLY_MESSAGE = "Please use this command in a one-to-one chat with the bot"
SUMMARY_FAILED_MESSAGE = "Could not load statistics, please try again later"
KING_WITHOUT_PICTURE_MESSAGE = "Could not find a picture of the poop king"
NO_RECORDS_MESSAGE = "No records yet"

_WINDOW_TITLES = {
    Window.TODAY: "today",
    Window.WEEK: "this week",
    Window.MONTH: "this month",
    Window.ALL_TIME: "all time",
}


def format_recorded(display_name: str, today_count: int, total_count: int) -> str:
    return f"💩 {display_name}: poop #{today_count} today\nTotal: {total_count}"


def format_rate_limited(display_name: str, ttl_hours: int) -> str:
    unit = "hour" if ttl_hours == 1 else "hours"
    return f"{display_name}, you can only record one poop every {ttl_hours} {unit}, please try again later"


def format_breakdown(by_category: dict) -> str:
    return ", ".join(f"{poop_type.label}: {by_category.get(poop_type, 0)}" for poop_type in PoopType)


def format_ranking(window: Window, entries: List[RankEntry]) -> str:
    """Numbered list with category breakdown, highest count first; a fixed line when nobody recorded."""
    title = _WINDOW_TITLES[window]
    if not entries:
        return f"Nobody has pooped {title} yet, keep trying!"

    lines = [f"💩 Poop ranking {title} 💩"]
    for position, entry in enumerate(entries, start=1):
        lines.append(
            f"{position}. {entry.display_name}: {entry.total_count} ({format_breakdown(entry.category_counts)})"
        )
    return "\n".join(lines)


def _board_section(title: str, entries: List[RankEntry]) -> List[str]:
    lines = ["", f"📅 {title} 📅"]
    if not entries:
        lines.append(NO_RECORDS_MESSAGE)
    for position, entry in enumerate(entries, start=1):
        lines.append(
            f"{position}. {entry.display_name} {entry.total_count} ({format_breakdown(entry.category_counts)})"
        )
    return lines


def format_rank_board(weekly: List[RankEntry], monthly: List[RankEntry]) -> str:
    lines = ["💩 Group leaderboard 💩"]
    lines += _board_section("This week", weekly)
    lines += _board_section("This month", monthly)
    return "\n".join(lines)


def _counts_block(title: str, counts: CategoryCounts) -> List[str]:
    lines = ["", f"📆 {title} 📆", f"Total: {counts.total}"]
    lines += [f"{poop_type.label}: {counts.by_category[poop_type]}" for poop_type in PoopType]
    return lines


def format_summary(display_name: str, summary: Summary) -> str:
    lines = [f"💩 {display_name}'s poop statistics 💩"]
    lines += _counts_block("Today", summary.today)
    lines += _counts_block("This week", summary.week)
    lines += _counts_block("This month", summary.month)
    lines += ["", f"All time: {summary.total.total}", f"Daily average: {summary.daily_average}"]
    return "\n".join(lines)


def format_group_summary(summary: GroupSummary) -> str:
    lines = ["💩 Group poop statistics 💩"]
    lines += _counts_block("This week", summary.week)
    lines += _counts_block("This month", summary.month)
    lines += ["", f"All time: {summary.total.total}"]
    return "\n".join(lines)
