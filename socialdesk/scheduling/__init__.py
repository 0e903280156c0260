"""
Approval, scheduling and publishing core.
"""
from .errors import (
    SchedulingError,
    ValidationError,
    PreconditionError,
    NotFoundError,
    TenantMismatchError,
    ExternalServiceError,
    PersistenceError,
)
from .generator import generate_occurrences, build_instances
from .calendar import CalendarInstance, OneTimeSchedule, RepeatingSchedule, merge_instances, group_by_date

__all__ = [
    "SchedulingError",
    "ValidationError",
    "PreconditionError",
    "NotFoundError",
    "TenantMismatchError",
    "ExternalServiceError",
    "PersistenceError",
    "generate_occurrences",
    "build_instances",
    "CalendarInstance",
    "OneTimeSchedule",
    "RepeatingSchedule",
    "merge_instances",
    "group_by_date",
]
