from .approval import TextDecision, ImageDecision
from .posts import PostCreate, PostUpdate
from .schedule import ScheduleRequest, PostAction
from .schedules import ScheduleCreate, ScheduleStatusUpdate, ScheduleApprove, InstanceUpdate

__all__ = [
    "TextDecision", "ImageDecision",
    "PostCreate", "PostUpdate",
    "ScheduleRequest", "PostAction",
    "ScheduleCreate", "ScheduleStatusUpdate", "ScheduleApprove", "InstanceUpdate",
]
