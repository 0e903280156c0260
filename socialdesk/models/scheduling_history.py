"""
SchedulingHistory model: audit log of scheduling and publishing actions.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, ForeignKey
from ..timeutils import utcnow
from ..database import Base


class SchedulingHistory(Base):
    __tablename__ = "scheduling_history"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    instance_id = Column(Integer, ForeignKey("schedule_instances.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(50), nullable=False, index=True)  # scheduled, unscheduled, published, publish_failed, instance_sent, instance_failed, repeat
    scheduled_for = Column(DateTime, nullable=True)
    platforms = Column(JSON, nullable=True)
    oneup_response = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
