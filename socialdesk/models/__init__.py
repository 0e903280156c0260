from .tenant import Tenant
from .brand import Brand
from .website import Website
from .post import Post
from .approval import Approval
from .post_schedule import PostSchedule
from .schedule_instance import ScheduleInstance
from .scheduling_history import SchedulingHistory

__all__ = [
    "Tenant",
    "Brand",
    "Website",
    "Post",
    "Approval",
    "PostSchedule",
    "ScheduleInstance",
    "SchedulingHistory",
]
