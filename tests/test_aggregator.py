"""Tests for windows, rankings and summaries."""

import datetime

import pytest

import aggregator
from aggregator import Window, daily_average, round_half_up, window_bounds
from models import PoopType


def dt(*args):
    return datetime.datetime(*args)


class TestWindowBounds:

    def test_today(self, now):
        assert window_bounds(Window.TODAY, now) == (dt(2025, 2, 19), dt(2025, 2, 20))

    def test_week_starts_on_monday(self, now):
        assert window_bounds(Window.WEEK, now) == (dt(2025, 2, 17), dt(2025, 2, 24))

    def test_week_on_sunday(self):
        assert window_bounds(Window.WEEK, dt(2025, 2, 23, 23, 59)) == (dt(2025, 2, 17), dt(2025, 2, 24))

    def test_month(self, now):
        assert window_bounds(Window.MONTH, now) == (dt(2025, 2, 1), dt(2025, 3, 1))

    def test_december_rolls_into_next_year(self):
        assert window_bounds(Window.MONTH, dt(2024, 12, 31, 8)) == (dt(2024, 12, 1), dt(2025, 1, 1))

    def test_all_time(self, now):
        assert window_bounds(Window.ALL_TIME, now) == (None, None)


class TestDailyAverage:

    def test_no_records(self, now):
        assert daily_average(0, None, now) == 0

    def test_single_record_today(self, now):
        assert daily_average(1, now - datetime.timedelta(hours=1), now) == 1

    def test_counts_first_day(self, now):
        # 5 records over 4 days -> 1.25
        assert daily_average(5, now - datetime.timedelta(days=3), now) == 1

    def test_rounds_half_up(self, now):
        # 3 records over 2 days -> 1.5
        assert daily_average(3, now - datetime.timedelta(days=1), now) == 2
        assert round_half_up(2.5) == 3
        assert round_half_up(0.49) == 0


class TestRank:

    def test_sorted_by_total_descending(self, add_record, now):
        for _ in range(2):
            add_record("U1")
        for _ in range(5):
            add_record("U2")
        add_record("U3")

        ranking = aggregator.rank("G1", Window.TODAY, now)

        assert [entry.user_id for entry in ranking] == ["U2", "U1", "U3"]
        assert [entry.total_count for entry in ranking] == [5, 2, 1]

    def test_ties_keep_first_recorder_first(self, add_record, now):
        monday = dt(2025, 2, 17, 9)
        add_record("U2", when=monday)
        add_record("U3", when=monday + datetime.timedelta(hours=1))
        for _ in range(5):
            add_record("U1", when=now)
        add_record("U3", when=now)
        add_record("U3", when=now)
        add_record("U2", when=now)
        add_record("U2", when=now)

        ranking = aggregator.rank("G1", Window.WEEK, now)

        assert [(e.user_id, e.total_count) for e in ranking] == [("U1", 5), ("U2", 3), ("U3", 3)]

    def test_category_counts_include_zeros(self, add_record, now):
        add_record("U1", poop_type=PoopType.BAD)
        add_record("U1", poop_type=PoopType.BAD)
        add_record("U1", poop_type=PoopType.GOOD)

        (entry,) = aggregator.rank("G1", Window.TODAY, now)

        assert entry.category_counts == {PoopType.GOOD: 1, PoopType.STUCK: 0, PoopType.BAD: 2}

    def test_window_and_group_filters(self, add_record, now):
        add_record("U1", when=now)
        add_record("U1", when=dt(2025, 2, 16, 23, 59))   # last week, same month
        add_record("U1", when=dt(2025, 1, 31, 12))       # last month
        add_record("U1", when=dt(2024, 2, 10, 12))       # same month last year
        add_record("U1", group_id="G2", when=now)
        add_record("U1", group_id=None, when=now)

        assert aggregator.rank("G1", Window.TODAY, now)[0].total_count == 1
        assert aggregator.rank("G1", Window.WEEK, now)[0].total_count == 1
        assert aggregator.rank("G1", Window.MONTH, now)[0].total_count == 2
        assert aggregator.rank("G1", Window.ALL_TIME, now)[0].total_count == 4

    def test_display_name_from_first_record_in_window(self, add_record, now):
        add_record("U1", when=dt(2025, 2, 18, 8), user_name="Old name")
        add_record("U1", when=now, user_name="New name")

        assert aggregator.rank("G1", Window.WEEK, now)[0].display_name == "Old name"
        assert aggregator.rank("G1", Window.TODAY, now)[0].display_name == "New name"

    def test_empty(self, db, now):
        assert aggregator.rank("G1", Window.WEEK, now) == []
        assert aggregator.top_user("G1", now) is None

    def test_top_user_is_weekly_leader(self, add_record, now):
        add_record("U1", when=dt(2025, 2, 3, 8))
        add_record("U1", when=dt(2025, 2, 4, 8))
        add_record("U2", when=now)

        assert aggregator.top_user("G1", now).user_id == "U2"


class TestSummaries:

    def test_single_record_today(self, add_record, now):
        add_record("U1")

        summary = aggregator.summarize("U1", "G1", now)

        assert summary.today.total == 1
        assert summary.total.total == 1
        assert summary.daily_average == summary.total.total

    @pytest.mark.parametrize("category", list(PoopType))
    def test_today_breakdown_has_single_bucket(self, add_record, now, category):
        add_record("U1", poop_type=category)

        summary = aggregator.summarize("U1", "G1", now)

        for poop_type in PoopType:
            assert summary.today.by_category[poop_type] == (1 if poop_type is category else 0)

    def test_windows(self, add_record, now):
        add_record("U1", when=now)
        add_record("U1", when=dt(2025, 2, 18, 7), poop_type=PoopType.STUCK)
        add_record("U1", when=dt(2025, 2, 2, 7))
        add_record("U1", when=dt(2025, 1, 20, 7))   # first record: 30 days ago
        add_record("U2", when=now)

        summary = aggregator.summarize("U1", "G1", now)

        assert (summary.today.total, summary.week.total, summary.month.total, summary.total.total) == (1, 2, 3, 4)
        assert summary.week.by_category[PoopType.STUCK] == 1
        # 4 records over 31 days
        assert summary.daily_average == 0

    def test_one_to_one_summary_spans_every_chat(self, add_record, now):
        add_record("U1", group_id="G1")
        add_record("U1", group_id="G2")
        add_record("U1", group_id=None)

        assert aggregator.summarize("U1", None, now).total.total == 3
        assert aggregator.summarize("U1", "G2", now).total.total == 1

    def test_no_records(self, db, now):
        summary = aggregator.summarize("U1", "G1", now)
        assert summary.total.total == 0
        assert summary.daily_average == 0
        assert summary.today.by_category == {p: 0 for p in PoopType}

    def test_group_summary(self, add_record, now):
        add_record("U1", when=now, poop_type=PoopType.BAD)
        add_record("U2", when=now)
        add_record("U2", when=dt(2025, 2, 5, 9))
        add_record("U2", when=dt(2024, 11, 5, 9))
        add_record("U3", group_id="G2", when=now)

        summary = aggregator.group_summary("G1", now)

        assert (summary.week.total, summary.month.total, summary.total.total) == (2, 3, 4)
        assert summary.week.by_category == {PoopType.GOOD: 1, PoopType.STUCK: 0, PoopType.BAD: 1}
