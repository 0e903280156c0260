"""
Status vocabularies for approvals, repeating schedules and their instances.
"""
from enum import Enum


class TextStatus(str, Enum):
    """Stage 1: caption text review"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ImageStatus(str, Enum):
    """Stage 2: image review, only open once text is approved"""
    NOT_READY = "not_ready"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ScheduledStatus(str, Enum):
    """One-time (approval based) scheduling"""
    NOT_SCHEDULED = "not_scheduled"
    SCHEDULED = "scheduled"
    PUBLISHING = "publishing"
    PUBLISHED = "published"
    FAILED = "failed"


class RepeatType(str, Enum):
    NONE = "none"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class ScheduleStatus(str, Enum):
    """Lifecycle of a repeating PostSchedule"""
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    PAUSED = "paused"
    COMPLETED = "completed"


class InstanceStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


# A schedule in one of these states still owns its post
ACTIVE_SCHEDULE_STATUSES = (ScheduleStatus.PENDING_APPROVAL.value, ScheduleStatus.APPROVED.value)

# Instances that can still go out
READY_INSTANCE_STATUSES = (InstanceStatus.PENDING.value, InstanceStatus.APPROVED.value)

PLATFORMS_ALL = "ALL"
