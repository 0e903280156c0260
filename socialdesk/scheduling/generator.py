"""
Schedule Instance Generator

Expands a repeating schedule definition into concrete occurrence dates:

- none:      exactly one occurrence at the first publish time
- weekly:    every 7 days
- biweekly:  every 14 days
- monthly:   same day of month; short months clamp to their last day
- custom:    every ``repeat_interval`` days (>= 1)

Generation stops at the end date (inclusive, a bare date covers the whole
day) or, without one, ``horizon_months`` calendar months after the start.
"""
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

from dateutil.relativedelta import relativedelta

from ..logging_config import scheduling_logger
from ..models.post_schedule import PostSchedule
from ..models.schedule_instance import ScheduleInstance
from ..timeutils import end_of, to_naive_utc
from .errors import ValidationError
from .states import InstanceStatus, RepeatType

DEFAULT_HORIZON_MONTHS = 6

FIXED_STEPS = {
    RepeatType.WEEKLY.value: timedelta(days=7),
    RepeatType.BIWEEKLY.value: timedelta(days=14),
}


def generation_end(
    first_publish_at: datetime,
    repeat_end: Union[date, datetime, None] = None,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> datetime:
    """Last moment an occurrence may fall on."""
    if repeat_end is not None:
        return end_of(repeat_end)
    return first_publish_at + relativedelta(months=horizon_months)


def generate_occurrences(
    first_publish_at: datetime,
    repeat_type: str,
    repeat_interval: Optional[int] = None,
    repeat_end: Union[date, datetime, None] = None,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> List[datetime]:
    """
    Compute the ordered occurrence datetimes of a schedule.

    Args:
        first_publish_at: First occurrence (naive UTC or aware)
        repeat_type: One of ``RepeatType`` values
        repeat_interval: Days between occurrences for ``custom``
        repeat_end: Optional inclusive end date/datetime
        horizon_months: Window used when there is no end date

    Returns:
        Ascending list of naive UTC datetimes (possibly empty)
    """
    start = to_naive_utc(first_publish_at)
    repeat_type = getattr(repeat_type, "value", repeat_type)

    if repeat_type == RepeatType.NONE.value:
        return [start]

    if repeat_type == RepeatType.CUSTOM.value:
        if repeat_interval is None or repeat_interval < 1:
            raise ValidationError("repeat_interval must be at least 1 day for custom schedules",
                                  {"field": "repeat_interval"})

    end = generation_end(start, repeat_end, horizon_months)
    occurrences: List[datetime] = []
    step = 0
    current = start

    while current <= end:
        occurrences.append(current)
        step += 1

        if repeat_type in FIXED_STEPS:
            current = start + FIXED_STEPS[repeat_type] * step
        elif repeat_type == RepeatType.MONTHLY.value:
            # Always offset from the anchor so a clamped Feb 28 goes back to the 31st
            current = start + relativedelta(months=step)
        elif repeat_type == RepeatType.CUSTOM.value:
            current = start + timedelta(days=repeat_interval * step)
        else:
            scheduling_logger.warning(
                "Unknown repeat type, stopping instance generation",
                repeat_type=repeat_type,
                generated=len(occurrences),
            )
            break

    return occurrences


def build_instances(
    schedule: PostSchedule,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> List[ScheduleInstance]:
    """Create (unsaved) pending instances for a schedule."""
    occurrences = generate_occurrences(
        schedule.first_publish_at,
        schedule.repeat_type,
        repeat_interval=schedule.repeat_interval,
        repeat_end=schedule.repeat_end_date,
        horizon_months=horizon_months,
    )

    return [
        ScheduleInstance(
            schedule_id=schedule.id,
            post_id=schedule.post_id,
            brand_id=schedule.brand_id,
            scheduled_for=when,
            original_scheduled_for=when,
            status=InstanceStatus.PENDING.value,
            is_modified=False,
        )
        for when in occurrences
    ]
