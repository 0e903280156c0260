from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime
from typing import Optional

from ..scheduling.states import InstanceStatus, RepeatType, ScheduleStatus
from ..timeutils import parse_hhmm, to_naive_utc


class ScheduleCreate(BaseModel):
    post_id: int
    brand_id: int
    first_publish_at: datetime
    publish_time: Optional[str] = None  # HH:MM, overrides the time of first_publish_at
    repeat_type: RepeatType = RepeatType.NONE
    repeat_interval: Optional[int] = Field(default=None, ge=1)
    repeat_end_date: Optional[date] = None
    created_by: str = Field(min_length=1)  # 'claude:session' or 'dashboard:user@email'
    notes: Optional[str] = None

    @field_validator("publish_time")
    @classmethod
    def check_publish_time(cls, value):
        if value is not None:
            parse_hhmm(value)
        return value

    @model_validator(mode="after")
    def check_interval(self):
        if self.repeat_type == RepeatType.CUSTOM and not self.repeat_interval:
            raise ValueError("repeat_interval is required for custom schedules")
        return self

    def start(self) -> datetime:
        """First occurrence as naive UTC with publish_time applied."""
        start = to_naive_utc(self.first_publish_at)
        if self.publish_time:
            start = datetime.combine(start.date(), parse_hhmm(self.publish_time))
        return start


class ScheduleStatusUpdate(BaseModel):
    status: ScheduleStatus


class ScheduleApprove(BaseModel):
    schedule_id: Optional[int] = None
    instance_id: Optional[int] = None
    approved_by: str = Field(min_length=1)
    category_id: Optional[int] = None

    @model_validator(mode="after")
    def check_target(self):
        if not self.schedule_id and not self.instance_id:
            raise ValueError("Either schedule_id or instance_id is required")
        return self


class InstanceUpdate(BaseModel):
    instance_id: int
    scheduled_for: Optional[datetime] = None
    status: Optional[InstanceStatus] = None
    skip_reason: Optional[str] = None
