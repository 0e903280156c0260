"""
Approval state machine.

Every mutation of an ``Approval`` goes through one of these functions so the
two invariants hold at all times:

- ``image_status`` stays ``not_ready`` until the text is approved;
- ``scheduled_status == scheduled`` implies text and image are approved.

The functions only touch the object they are given; persisting it (and the
paired-post propagation) is the caller's job.
"""
from datetime import datetime
from typing import Iterable, Optional

from ..models.approval import Approval
from ..timeutils import utcnow
from .errors import PreconditionError, ValidationError
from .states import ImageStatus, ScheduledStatus, TextStatus

LOCKED_SCHEDULE_STATES = (ScheduledStatus.SCHEDULED.value, ScheduledStatus.PUBLISHING.value)


def new_approval(post_id: Optional[int] = None) -> Approval:
    """Initial record created alongside a post."""
    return Approval(
        post_id=post_id,
        text_status=TextStatus.PENDING.value,
        image_status=ImageStatus.NOT_READY.value,
        scheduled_status=ScheduledStatus.NOT_SCHEDULED.value,
        target_platforms=[],
    )


def is_fully_approved(approval: Approval) -> bool:
    return (
        approval.text_status == TextStatus.APPROVED.value
        and approval.image_status == ImageStatus.APPROVED.value
    )


def scheduled_status_of(approval: Approval) -> str:
    return approval.scheduled_status or ScheduledStatus.NOT_SCHEDULED.value


def _require_reason(reason: Optional[str], what: str) -> str:
    if reason is None or not reason.strip():
        raise ValidationError(f"Rejection reason is required when rejecting {what}", {"field": "rejection_reason"})
    return reason.strip()


def _require_unlocked(approval: Approval, action: str) -> None:
    if scheduled_status_of(approval) in LOCKED_SCHEDULE_STATES:
        raise PreconditionError(
            f"Cannot {action} while the post is {scheduled_status_of(approval)}; unschedule it first"
        )


def _close_image_stage(approval: Approval) -> None:
    approval.image_status = ImageStatus.NOT_READY.value
    approval.image_rejection_reason = None


# ============================================================
# STAGE 1: TEXT
# ============================================================

def decide_text(approval: Approval, status: str, reason: Optional[str] = None) -> Approval:
    """Record a text review decision (approved, rejected or back to pending)."""
    if status not in {s.value for s in TextStatus}:
        raise ValidationError(f"Invalid text status '{status}'", {"field": "status"})
    _require_unlocked(approval, "change the text review")

    if status == TextStatus.APPROVED.value:
        approval.text_status = status
        approval.text_rejection_reason = None
        if approval.image_status in (None, ImageStatus.NOT_READY.value):
            approval.image_status = ImageStatus.PENDING.value
    elif status == TextStatus.REJECTED.value:
        approval.text_rejection_reason = _require_reason(reason, "a post")
        approval.text_status = status
        _close_image_stage(approval)
    else:
        approval.text_status = status
        approval.text_rejection_reason = None
        _close_image_stage(approval)

    approval.reviewed_at = utcnow()
    return approval


def resubmit_text(approval: Approval) -> Approval:
    """An edit of the title or caption sends the text back for review."""
    return decide_text(approval, TextStatus.PENDING.value)


# ============================================================
# STAGE 2: IMAGE
# ============================================================

def decide_image(approval: Approval, status: str, reason: Optional[str] = None) -> Approval:
    """Approve or reject the image; only possible once the text is approved."""
    if approval.text_status != TextStatus.APPROVED.value:
        raise PreconditionError("Text must be approved before image can be reviewed")
    if status not in (ImageStatus.APPROVED.value, ImageStatus.REJECTED.value):
        raise ValidationError(f"Invalid image status '{status}'", {"field": "image_status"})
    if approval.image_status not in (ImageStatus.PENDING.value, ImageStatus.REJECTED.value):
        raise PreconditionError(f"Image is {approval.image_status} and cannot be reviewed")
    _require_unlocked(approval, "change the image review")

    if status == ImageStatus.REJECTED.value:
        approval.image_rejection_reason = _require_reason(reason, "an image")
    else:
        approval.image_rejection_reason = None
    approval.image_status = status
    approval.image_reviewed_at = utcnow()
    return approval


# ============================================================
# ONE-TIME SCHEDULING
# ============================================================

def schedule(
    approval: Approval,
    scheduled_for: datetime,
    category_id: Optional[int] = None,
    platforms: Optional[Iterable[str]] = None,
) -> Approval:
    """Put a fully approved post on the calendar (or move it if already there)."""
    if not is_fully_approved(approval):
        raise PreconditionError("Post must be fully approved before scheduling")
    current = scheduled_status_of(approval)
    if current not in (ScheduledStatus.NOT_SCHEDULED.value, ScheduledStatus.SCHEDULED.value):
        raise ValidationError(f"Post is {current} and cannot be scheduled")

    approval.scheduled_for = scheduled_for
    approval.scheduled_status = ScheduledStatus.SCHEDULED.value
    approval.oneup_category_id = category_id
    approval.target_platforms = list(platforms or [])
    approval.publish_error = None
    return approval


def unschedule(approval: Approval) -> Approval:
    if scheduled_status_of(approval) != ScheduledStatus.SCHEDULED.value:
        raise ValidationError("Post is not scheduled")

    approval.scheduled_for = None
    approval.scheduled_status = ScheduledStatus.NOT_SCHEDULED.value
    approval.oneup_category_id = None
    approval.target_platforms = []
    return approval


def begin_publish(approval: Approval) -> Approval:
    if scheduled_status_of(approval) != ScheduledStatus.SCHEDULED.value:
        raise ValidationError("Post is not scheduled")
    approval.scheduled_status = ScheduledStatus.PUBLISHING.value
    return approval


def mark_published(approval: Approval) -> Approval:
    if scheduled_status_of(approval) != ScheduledStatus.PUBLISHING.value:
        raise PreconditionError("Post is not being published")
    approval.scheduled_status = ScheduledStatus.PUBLISHED.value
    approval.published_at = utcnow()
    approval.publish_error = None
    return approval


def mark_failed(approval: Approval, message: str) -> Approval:
    if scheduled_status_of(approval) != ScheduledStatus.PUBLISHING.value:
        raise PreconditionError("Post is not being published")
    approval.scheduled_status = ScheduledStatus.FAILED.value
    approval.publish_error = message or "Unknown error"
    return approval


def reset_for_repeat(approval: Approval) -> Approval:
    """Allow identical content to be scheduled again after it went out (or failed)."""
    current = scheduled_status_of(approval)
    if current not in (ScheduledStatus.PUBLISHED.value, ScheduledStatus.FAILED.value):
        raise ValidationError(f"Only published or failed posts can be repeated (post is {current})")

    approval.scheduled_status = ScheduledStatus.NOT_SCHEDULED.value
    approval.scheduled_for = None
    approval.publish_error = None
    return approval
