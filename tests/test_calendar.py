"""
Tests for merging one-time and repeating schedules into one calendar.
"""
from datetime import datetime

from socialdesk.models import Approval, Post, PostSchedule, ScheduleInstance
from socialdesk.scheduling.calendar import (
    OneTimeSchedule,
    RepeatingSchedule,
    group_by_date,
    map_legacy_status,
    merge_instances,
)


def make_post(post_id, title="Spring launch"):
    return Post(id=post_id, brand_id=1, title=title, content=f"Caption {post_id}", image_filename=f"{post_id}.png")


def one_time(approval_id, post, when, status="scheduled"):
    approval = Approval(id=approval_id, post_id=post.id, scheduled_for=when, scheduled_status=status)
    return OneTimeSchedule(approval, post)


def repeating(instance_id, post, when, status="pending"):
    schedule = PostSchedule(id=90, post_id=post.id, brand_id=1, repeat_type="weekly", status="approved")
    instance = ScheduleInstance(
        id=instance_id,
        schedule_id=schedule.id,
        post_id=post.id,
        brand_id=1,
        scheduled_for=when,
        original_scheduled_for=when,
        status=status,
        is_modified=False,
    )
    return RepeatingSchedule(instance, schedule, post)


class TestLegacyStatus:

    def test_mapping(self):
        assert map_legacy_status("published") == "sent"
        assert map_legacy_status("ready_again") == "sent"
        assert map_legacy_status("failed") == "failed"
        assert map_legacy_status("publishing") == "sending"
        assert map_legacy_status("scheduled") == "pending"
        assert map_legacy_status(None) == "pending"


class TestMergeInstances:

    def test_sorted_across_sources(self):
        a, b = make_post(1), make_post(2, "Summer menu")
        items = merge_instances([
            repeating(10, a, datetime(2030, 3, 8, 9, 0)),
            one_time(5, b, datetime(2030, 3, 1, 12, 0)),
            repeating(11, a, datetime(2030, 3, 1, 9, 0)),
        ])

        assert [i.id for i in items] == ["schedule:11", "approval:5", "schedule:10"]
        assert items[0].repeat_type == "weekly"
        assert items[1].repeat_type == "none"
        assert items[1].status == "pending"

    def test_same_post_same_day_keeps_repeating_entry(self):
        post = make_post(1)
        items = merge_instances([
            one_time(5, post, datetime(2030, 3, 1, 18, 0)),
            repeating(10, post, datetime(2030, 3, 1, 9, 0)),
        ])

        assert [i.id for i in items] == ["schedule:10"]

    def test_same_post_other_day_is_kept(self):
        post = make_post(1)
        items = merge_instances([
            one_time(5, post, datetime(2030, 3, 2, 9, 0)),
            repeating(10, post, datetime(2030, 3, 1, 9, 0)),
        ])

        assert len(items) == 2

    def test_entry_fields(self):
        post = make_post(3)
        item = merge_instances([one_time(5, post, datetime(2030, 3, 1, 9, 0), status="published")])[0]
        data = item.to_dict()

        assert data["source"] == "approval"
        assert data["source_id"] == 5
        assert data["status"] == "sent"
        assert data["post_title"] == "Spring launch"
        assert data["post_image"] == "3.png"
        assert data["scheduled_for"] == "2030-03-01T09:00:00"


class TestGroupByDate:

    def test_buckets_by_own_date(self):
        a, b = make_post(1), make_post(2, "Summer menu")
        items = merge_instances([
            repeating(10, a, datetime(2030, 3, 1, 9, 0)),
            one_time(5, b, datetime(2030, 3, 1, 23, 30)),
            repeating(11, a, datetime(2030, 3, 8, 9, 0)),
        ])
        grouped = group_by_date(items)

        assert list(grouped) == ["2030-03-01", "2030-03-08"]
        assert [i.id for i in grouped["2030-03-01"]] == ["schedule:10", "approval:5"]

    def test_empty(self):
        assert group_by_date([]) == {}
