"""
Calendar view: one time-ordered list of what goes out when for a brand.

Two storage paths feed it. Repeating schedules produce ``ScheduleInstance``
rows; the older one-time flow keeps its date on the post's ``Approval``. Both
are wrapped in a variant of ``ScheduleEntry`` and normalised to a
``CalendarInstance`` whose ``source`` says which table it came from.
"""
from collections import OrderedDict
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..logging_config import scheduling_logger
from ..models.approval import Approval
from ..models.post import Post
from ..models.post_schedule import PostSchedule
from ..models.schedule_instance import ScheduleInstance
from .states import ACTIVE_SCHEDULE_STATUSES, InstanceStatus, ScheduledStatus

SOURCE_SCHEDULE = "schedule"
SOURCE_APPROVAL = "approval"

LEGACY_STATUS_MAP = {
    ScheduledStatus.PUBLISHED.value: InstanceStatus.SENT.value,
    "ready_again": InstanceStatus.SENT.value,
    ScheduledStatus.FAILED.value: InstanceStatus.FAILED.value,
    ScheduledStatus.PUBLISHING.value: InstanceStatus.SENDING.value,
}


def map_legacy_status(scheduled_status: Optional[str]) -> str:
    """Translate an approval's scheduled_status into the instance vocabulary."""
    return LEGACY_STATUS_MAP.get(scheduled_status, InstanceStatus.PENDING.value)


@dataclass
class CalendarInstance:
    id: str
    source: str
    source_id: int
    post_id: int
    brand_id: int
    scheduled_for: datetime
    status: str
    post_title: str
    post_content: str
    post_image: Optional[str]
    repeat_type: str = "none"
    schedule_id: Optional[int] = None
    schedule_status: Optional[str] = None
    original_scheduled_for: Optional[datetime] = None
    is_modified: bool = False
    skip_reason: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def date_key(self) -> str:
        return self.scheduled_for.strftime("%Y-%m-%d")

    def to_dict(self) -> dict:
        data = asdict(self)
        data["scheduled_for"] = self.scheduled_for.isoformat()
        if self.original_scheduled_for:
            data["original_scheduled_for"] = self.original_scheduled_for.isoformat()
        return data


@dataclass
class OneTimeSchedule:
    """A post scheduled through its approval record."""
    approval: Approval
    post: Post

    def to_calendar_instance(self) -> CalendarInstance:
        return CalendarInstance(
            id=f"{SOURCE_APPROVAL}:{self.approval.id}",
            source=SOURCE_APPROVAL,
            source_id=self.approval.id,
            post_id=self.post.id,
            brand_id=self.post.brand_id,
            scheduled_for=self.approval.scheduled_for,
            status=map_legacy_status(self.approval.scheduled_status),
            post_title=self.post.title,
            post_content=self.post.content,
            post_image=self.post.image_filename,
            original_scheduled_for=self.approval.scheduled_for,
            error_message=self.approval.publish_error,
        )


@dataclass
class RepeatingSchedule:
    """One occurrence of a repeating PostSchedule."""
    instance: ScheduleInstance
    schedule: PostSchedule
    post: Post

    def to_calendar_instance(self) -> CalendarInstance:
        return CalendarInstance(
            id=f"{SOURCE_SCHEDULE}:{self.instance.id}",
            source=SOURCE_SCHEDULE,
            source_id=self.instance.id,
            post_id=self.post.id,
            brand_id=self.instance.brand_id,
            scheduled_for=self.instance.scheduled_for,
            status=self.instance.status,
            post_title=self.post.title,
            post_content=self.post.content,
            post_image=self.post.image_filename,
            repeat_type=self.schedule.repeat_type,
            schedule_id=self.schedule.id,
            schedule_status=self.schedule.status,
            original_scheduled_for=self.instance.original_scheduled_for,
            is_modified=bool(self.instance.is_modified),
            skip_reason=self.instance.skip_reason,
            error_message=self.instance.error_message,
        )


ScheduleEntry = Union[OneTimeSchedule, RepeatingSchedule]


def merge_instances(entries: Iterable[ScheduleEntry]) -> List[CalendarInstance]:
    """
    Normalise and sort entries by date.

    A post must not show up twice on one day. The legacy query already
    excludes posts with an active schedule, so a collision here means the two
    paths disagree; the repeating entry wins and the collision is logged.
    """
    items = sorted(
        (entry.to_calendar_instance() for entry in entries),
        key=lambda item: (item.scheduled_for, item.source != SOURCE_SCHEDULE, item.source_id),
    )

    scheduled_days = {(i.post_id, i.date_key) for i in items if i.source == SOURCE_SCHEDULE}
    merged = []
    for item in items:
        if item.source == SOURCE_APPROVAL and (item.post_id, item.date_key) in scheduled_days:
            scheduling_logger.warning(
                "Dropping legacy calendar entry that duplicates a repeating schedule",
                post_id=item.post_id,
                date=item.date_key,
                approval_id=item.source_id,
            )
            continue
        merged.append(item)
    return merged


def group_by_date(items: Iterable[CalendarInstance]) -> Dict[str, List[CalendarInstance]]:
    """Bucket instances by their own YYYY-MM-DD, keeping order."""
    by_date: Dict[str, List[CalendarInstance]] = OrderedDict()
    for item in items:
        by_date.setdefault(item.date_key, []).append(item)
    return by_date


# ============================================================
# DATABASE LOADERS
# ============================================================

def active_schedule_post_ids(brand_id: int):
    """Subquery of posts owned by a non paused, non completed schedule."""
    return select(PostSchedule.post_id).where(
        PostSchedule.brand_id == brand_id,
        PostSchedule.status.in_(ACTIVE_SCHEDULE_STATUSES),
    )


def fetch_repeating(
    db: Session, brand_id: int, start: datetime, end: datetime, include_skipped: bool = False
) -> List[RepeatingSchedule]:
    query = (
        db.query(ScheduleInstance, PostSchedule, Post)
        .join(PostSchedule, PostSchedule.id == ScheduleInstance.schedule_id)
        .join(Post, Post.id == ScheduleInstance.post_id)
        .filter(
            ScheduleInstance.brand_id == brand_id,
            ScheduleInstance.scheduled_for >= start,
            ScheduleInstance.scheduled_for <= end,
        )
    )
    if not include_skipped:
        query = query.filter(ScheduleInstance.status != InstanceStatus.SKIPPED.value)
    return [RepeatingSchedule(instance, schedule, post) for instance, schedule, post in query.all()]


def fetch_one_time(db: Session, brand_id: int, start: datetime, end: datetime) -> List[OneTimeSchedule]:
    rows = (
        db.query(Approval, Post)
        .join(Post, Post.id == Approval.post_id)
        .filter(
            Post.brand_id == brand_id,
            or_(Post.is_duplicate.is_(False), Post.is_duplicate.is_(None)),
            Approval.scheduled_for.isnot(None),
            Approval.scheduled_for >= start,
            Approval.scheduled_for <= end,
            Approval.scheduled_status != ScheduledStatus.NOT_SCHEDULED.value,
            Post.id.notin_(active_schedule_post_ids(brand_id)),
        )
        .all()
    )
    return [OneTimeSchedule(approval, post) for approval, post in rows]


def load_calendar(
    db: Session, brand_id: int, start: datetime, end: datetime, include_skipped: bool = False
) -> List[CalendarInstance]:
    entries: List[ScheduleEntry] = []
    entries.extend(fetch_repeating(db, brand_id, start, end, include_skipped))
    entries.extend(fetch_one_time(db, brand_id, start, end))
    return merge_instances(entries)
