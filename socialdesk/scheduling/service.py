"""
Scheduling operations that read or write the datastore.

Functions here flush but never commit: the caller owns the unit of work, so
a paired-post propagation or an instance batch is applied completely or not
at all. On a ``SchedulingError`` the session is rolled back before re-raising.
"""
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterable, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..logging_config import scheduling_logger
from ..models.approval import Approval
from ..models.brand import Brand
from ..models.post import Post
from ..models.post_schedule import PostSchedule
from ..models.schedule_instance import ScheduleInstance
from ..models.scheduling_history import SchedulingHistory
from ..timeutils import to_naive_utc
from . import state_machine
from .errors import PreconditionError, SchedulingError, ValidationError
from .generator import DEFAULT_HORIZON_MONTHS, build_instances
from .states import (
    ACTIVE_SCHEDULE_STATUSES,
    READY_INSTANCE_STATUSES,
    ImageStatus,
    InstanceStatus,
    RepeatType,
    ScheduledStatus,
    ScheduleStatus,
    TextStatus,
)


@contextmanager
def unit_of_work(db: Session):
    """Roll back pending changes when a scheduling rule is violated."""
    try:
        yield
    except SchedulingError:
        db.rollback()
        raise


def record_history(db: Session, post_id: int, action: str, **fields) -> SchedulingHistory:
    entry = SchedulingHistory(post_id=post_id, action=action, **fields)
    db.add(entry)
    return entry


# ============================================================
# POSTS
# ============================================================

def approval_for(db: Session, post: Post) -> Approval:
    """The post's approval record, created on first access for older rows."""
    if post.approval is None:
        post.approval = state_machine.new_approval(post.id)
        db.flush()
    return post.approval


def create_post(
    db: Session,
    brand: Brand,
    title: str,
    content: str,
    image_filename: Optional[str] = None,
    approve_text: bool = False,
) -> Post:
    """Create a post with its approval record in the same transaction."""
    next_index = db.query(func.coalesce(func.max(Post.post_index), -1) + 1).filter(
        Post.brand_id == brand.id
    ).scalar()

    post = Post(
        brand_id=brand.id,
        post_index=next_index,
        title=title,
        content=content,
        image_filename=image_filename or f"{brand.slug}-placeholder-{next_index}.png",
    )
    post.approval = state_machine.new_approval()
    if approve_text:
        state_machine.decide_text(post.approval, "approved")
    db.add(post)
    db.flush()
    return post


def edit_post(
    db: Session,
    post: Post,
    title: Optional[str] = None,
    content: Optional[str] = None,
    image_filename: Optional[str] = None,
) -> Post:
    """Edit a post; a changed title or caption goes back to text review."""
    with unit_of_work(db):
        text_changed = (title is not None and title != post.title) or (
            content is not None and content != post.content
        )
        if text_changed:
            state_machine.resubmit_text(approval_for(db, post))

        if title is not None:
            post.title = title
        if content is not None:
            post.content = content
        if image_filename is not None:
            post.image_filename = image_filename
        db.flush()
    return post


def paired_posts(db: Session, post: Post) -> List[Post]:
    """The post plus every platform-duplicate sharing its title and brand."""
    return (
        db.query(Post)
        .filter(Post.brand_id == post.brand_id, Post.title == post.title)
        .order_by(Post.id)
        .all()
    )


# ============================================================
# ONE-TIME (APPROVAL BASED) SCHEDULING
# ============================================================

def schedule_post_group(
    db: Session,
    post: Post,
    scheduled_for: datetime,
    category_id: Optional[int] = None,
    platforms: Optional[Iterable[str]] = None,
) -> List[Post]:
    """Schedule a post and all of its paired posts as one unit."""
    scheduled_for = to_naive_utc(scheduled_for)
    platforms = list(platforms or [])
    group = paired_posts(db, post)

    with unit_of_work(db):
        for member in group:
            try:
                state_machine.schedule(approval_for(db, member), scheduled_for, category_id, platforms)
            except SchedulingError as e:
                if member.id == post.id:
                    raise
                raise type(e)(f"Paired post {member.id}: {e.message}", {"post_id": member.id}) from e
            record_history(db, member.id, "scheduled", scheduled_for=scheduled_for, platforms=platforms)
        db.flush()

    scheduling_logger.info(
        "Scheduled post group",
        post_id=post.id,
        post_ids=[p.id for p in group],
        scheduled_for=scheduled_for,
    )
    return group


def unschedule_post_group(db: Session, post: Post) -> List[Post]:
    """Unschedule a post and whichever of its paired posts are scheduled."""
    with unit_of_work(db):
        state_machine.unschedule(approval_for(db, post))
        record_history(db, post.id, "unscheduled")
        affected = [post]

        for member in paired_posts(db, post):
            if member.id == post.id:
                continue
            approval = approval_for(db, member)
            if state_machine.scheduled_status_of(approval) == ScheduledStatus.SCHEDULED.value:
                state_machine.unschedule(approval)
                record_history(db, member.id, "unscheduled")
                affected.append(member)
        db.flush()

    scheduling_logger.info("Unscheduled post group", post_id=post.id, post_ids=[p.id for p in affected])
    return affected


def repeat_post(db: Session, post: Post) -> List[Post]:
    """Reset a published or failed post, and its finished paired posts, so they can be scheduled again."""
    finished = (ScheduledStatus.PUBLISHED.value, ScheduledStatus.FAILED.value)
    with unit_of_work(db):
        state_machine.reset_for_repeat(approval_for(db, post))
        record_history(db, post.id, "repeat")
        affected = [post]

        for member in paired_posts(db, post):
            if member.id == post.id:
                continue
            approval = approval_for(db, member)
            if state_machine.scheduled_status_of(approval) in finished:
                state_machine.reset_for_repeat(approval)
                record_history(db, member.id, "repeat")
                affected.append(member)
        db.flush()

    scheduling_logger.info("Reset post group for repeat", post_id=post.id, post_ids=[p.id for p in affected])
    return affected


def scheduled_posts(db: Session, brand_ids: Iterable[int], status: Optional[str] = None) -> List[Post]:
    """Posts on the one-time calendar (anything not ``not_scheduled``)."""
    query = (
        db.query(Post)
        .join(Approval, Approval.post_id == Post.id)
        .filter(
            Post.brand_id.in_(list(brand_ids)),
            Approval.scheduled_status != ScheduledStatus.NOT_SCHEDULED.value,
        )
    )
    if status and status != "all":
        query = query.filter(Approval.scheduled_status == status)
    return query.order_by(Approval.scheduled_for.asc()).all()


def ready_posts(db: Session, brand_ids: Iterable[int]) -> List[Post]:
    """Fully approved, unscheduled posts, one per title."""
    posts = (
        db.query(Post)
        .join(Approval, Approval.post_id == Post.id)
        .filter(
            Post.brand_id.in_(list(brand_ids)),
            or_(Post.is_duplicate.is_(False), Post.is_duplicate.is_(None)),
            Approval.text_status == TextStatus.APPROVED.value,
            Approval.image_status == ImageStatus.APPROVED.value,
            Approval.scheduled_status == ScheduledStatus.NOT_SCHEDULED.value,
        )
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )

    seen = set()
    unique = []
    for post in posts:
        key = (post.brand_id, post.title)
        if key in seen:
            continue
        seen.add(key)
        unique.append(post)
    return unique


# ============================================================
# REPEATING SCHEDULES
# ============================================================

def active_schedule_for(db: Session, post_id: int, exclude_id: Optional[int] = None) -> Optional[PostSchedule]:
    query = db.query(PostSchedule).filter(
        PostSchedule.post_id == post_id,
        PostSchedule.status.in_(ACTIVE_SCHEDULE_STATUSES),
    )
    if exclude_id is not None:
        query = query.filter(PostSchedule.id != exclude_id)
    return query.first()


def create_schedule(
    db: Session,
    post: Post,
    first_publish_at: datetime,
    created_by: str,
    repeat_type: str = RepeatType.NONE.value,
    repeat_interval: Optional[int] = None,
    repeat_end_date: Optional[date] = None,
    notes: Optional[str] = None,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> PostSchedule:
    """Create a repeating schedule and its instance batch."""
    with unit_of_work(db):
        if active_schedule_for(db, post.id):
            raise ValidationError("Post already has an active schedule. Pause or complete it first.")

        schedule = PostSchedule(
            post_id=post.id,
            brand_id=post.brand_id,
            first_publish_at=to_naive_utc(first_publish_at),
            repeat_type=repeat_type,
            repeat_interval=repeat_interval,
            repeat_end_date=repeat_end_date,
            created_by=created_by,
            notes=notes,
            status=ScheduleStatus.PENDING_APPROVAL.value,
        )
        db.add(schedule)
        db.flush()

        instances = build_instances(schedule, horizon_months)
        db.add_all(instances)
        db.flush()

    scheduling_logger.info(
        "Created schedule",
        schedule_id=schedule.id,
        post_id=post.id,
        repeat_type=repeat_type,
        instances=len(instances),
    )
    return schedule


def set_schedule_status(db: Session, schedule: PostSchedule, status: str) -> PostSchedule:
    """Pause, resume or complete a schedule."""
    with unit_of_work(db):
        current = schedule.status
        if current == ScheduleStatus.COMPLETED.value:
            raise ValidationError("Schedule is already completed")

        if status == ScheduleStatus.PAUSED.value:
            if current not in ACTIVE_SCHEDULE_STATUSES:
                raise ValidationError(f"Cannot pause a {current} schedule")
            schedule.status = status
        elif status in ACTIVE_SCHEDULE_STATUSES:
            if current != ScheduleStatus.PAUSED.value:
                raise ValidationError(f"Only paused schedules can be resumed (schedule is {current})")
            if active_schedule_for(db, schedule.post_id, exclude_id=schedule.id):
                raise PreconditionError("Post already has another active schedule")
            schedule.status = (
                ScheduleStatus.APPROVED.value if schedule.approved_at else ScheduleStatus.PENDING_APPROVAL.value
            )
        elif status == ScheduleStatus.COMPLETED.value:
            schedule.status = status
            for instance in schedule.instances:
                if instance.status in READY_INSTANCE_STATUSES:
                    instance.status = InstanceStatus.SKIPPED.value
                    instance.skip_reason = "Schedule completed"
        else:
            raise ValidationError(f"Invalid schedule status '{status}'")
        db.flush()
    return schedule


def edit_instance(
    db: Session,
    instance: ScheduleInstance,
    scheduled_for: Optional[datetime] = None,
    status: Optional[str] = None,
    skip_reason: Optional[str] = None,
) -> ScheduleInstance:
    """Move an instance and/or change its status."""
    with unit_of_work(db):
        if instance.status in (InstanceStatus.SENT.value, InstanceStatus.SENDING.value):
            raise ValidationError(f"Instance is {instance.status} and can no longer be edited")

        if scheduled_for is not None:
            scheduled_for = to_naive_utc(scheduled_for)
            if scheduled_for != instance.scheduled_for:
                if not instance.is_modified:
                    instance.original_scheduled_for = instance.scheduled_for
                instance.scheduled_for = scheduled_for
                instance.is_modified = True

        if status is not None:
            if status == InstanceStatus.SKIPPED.value:
                skip_instance(db, instance, skip_reason)
            elif status in (InstanceStatus.PENDING.value, InstanceStatus.APPROVED.value):
                instance.status = status
                instance.skip_reason = None
                instance.error_message = None
            else:
                raise ValidationError(f"Instance status cannot be set to '{status}'")
        db.flush()
    return instance


def skip_instance(db: Session, instance: ScheduleInstance, reason: Optional[str] = None) -> ScheduleInstance:
    """Soft-delete an instance; sent instances are kept as they are."""
    with unit_of_work(db):
        if instance.status == InstanceStatus.SENT.value:
            raise ValidationError("Cannot delete instance that has already been sent to OneUp")
        if instance.status == InstanceStatus.SENDING.value:
            raise PreconditionError("Instance is being sent")

        instance.status = InstanceStatus.SKIPPED.value
        instance.skip_reason = reason or "Manually removed"
        db.flush()
    return instance


def ready_instances(db: Session, brand_ids: Iterable[int], until: Optional[datetime] = None) -> List[ScheduleInstance]:
    """Instances that can still be sent, from schedules that are not paused or completed."""
    query = (
        db.query(ScheduleInstance)
        .join(PostSchedule, PostSchedule.id == ScheduleInstance.schedule_id)
        .filter(
            ScheduleInstance.brand_id.in_(list(brand_ids)),
            ScheduleInstance.status.in_(READY_INSTANCE_STATUSES),
            PostSchedule.status.in_(ACTIVE_SCHEDULE_STATUSES),
        )
    )
    if until is not None:
        query = query.filter(ScheduleInstance.scheduled_for <= to_naive_utc(until))
    return query.order_by(ScheduleInstance.scheduled_for.asc()).all()

