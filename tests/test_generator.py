"""
Tests for schedule instance generation.
"""
from datetime import date, datetime, timedelta, timezone

import pytest
from dateutil.relativedelta import relativedelta

from socialdesk.models.post_schedule import PostSchedule
from socialdesk.scheduling.errors import ValidationError
from socialdesk.scheduling.generator import build_instances, generate_occurrences


START = datetime(2025, 1, 1, 10, 0)


class TestGenerateOccurrences:

    def test_weekly_with_inclusive_end_date(self):
        result = generate_occurrences(START, "weekly", repeat_end=date(2025, 1, 22))
        assert result == [
            datetime(2025, 1, 1, 10, 0),
            datetime(2025, 1, 8, 10, 0),
            datetime(2025, 1, 15, 10, 0),
            datetime(2025, 1, 22, 10, 0),
        ]

    def test_none_is_a_single_occurrence(self):
        assert generate_occurrences(START, "none", repeat_end=date(2025, 6, 1)) == [START]

    def test_biweekly(self):
        result = generate_occurrences(START, "biweekly", repeat_end=date(2025, 2, 1))
        assert [d.day for d in result] == [1, 15, 29]

    def test_monthly_clamps_to_last_day(self):
        result = generate_occurrences(datetime(2025, 1, 31, 9, 0), "monthly", repeat_end=date(2025, 5, 31))
        assert [d.date() for d in result] == [
            date(2025, 1, 31),
            date(2025, 2, 28),
            date(2025, 3, 31),
            date(2025, 4, 30),
            date(2025, 5, 31),
        ]
        assert all(d.hour == 9 for d in result)

    def test_monthly_leap_year(self):
        result = generate_occurrences(datetime(2024, 1, 31, 9, 0), "monthly", repeat_end=date(2024, 3, 1))
        assert [d.date() for d in result] == [date(2024, 1, 31), date(2024, 2, 29)]

    def test_custom_interval(self):
        result = generate_occurrences(START, "custom", repeat_interval=3, repeat_end=date(2025, 1, 10))
        assert [d.day for d in result] == [1, 4, 7, 10]

    @pytest.mark.parametrize("interval", [None, 0, -2])
    def test_custom_interval_must_be_positive(self, interval):
        with pytest.raises(ValidationError):
            generate_occurrences(START, "custom", repeat_interval=interval, repeat_end=date(2025, 1, 10))

    def test_unknown_type_stops_after_first(self):
        result = generate_occurrences(START, "fortnightly", repeat_end=date(2025, 3, 1))
        assert result == [START]

    def test_end_before_start_is_empty(self):
        assert generate_occurrences(START, "weekly", repeat_end=date(2024, 12, 31)) == []

    def test_default_horizon_is_six_months(self):
        result = generate_occurrences(START, "weekly")
        assert len(result) == 26
        assert result[-1] == START + timedelta(weeks=25)
        assert result[-1] <= START + relativedelta(months=6)

    def test_custom_horizon(self):
        result = generate_occurrences(START, "monthly", horizon_months=2)
        assert [d.month for d in result] == [1, 2, 3]

    def test_aware_start_is_converted_to_utc(self):
        aware = datetime(2025, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert generate_occurrences(aware, "none") == [datetime(2025, 1, 1, 10, 0)]

    def test_ascending_and_unique(self):
        result = generate_occurrences(START, "custom", repeat_interval=1, repeat_end=date(2025, 1, 31))
        assert len(result) == 31
        assert result == sorted(set(result))


class TestBuildInstances:

    def test_instances_start_unmodified_and_pending(self):
        schedule = PostSchedule(
            id=7,
            post_id=3,
            brand_id=2,
            first_publish_at=START,
            repeat_type="weekly",
            repeat_end_date=date(2025, 1, 15),
        )
        instances = build_instances(schedule)

        assert len(instances) == 3
        for instance in instances:
            assert instance.schedule_id == 7
            assert instance.post_id == 3
            assert instance.brand_id == 2
            assert instance.status == "pending"
            assert instance.is_modified is False
            assert instance.original_scheduled_for == instance.scheduled_for
