from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional


class ScheduleRequest(BaseModel):
    post_id: int
    scheduled_for: datetime
    category_id: Optional[int] = None
    platforms: List[str] = []


class PostAction(BaseModel):
    post_id: int
