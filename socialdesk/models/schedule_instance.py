"""
ScheduleInstance model: one concrete occurrence of a PostSchedule.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, JSON, ForeignKey
from sqlalchemy.orm import relationship
from ..timeutils import utcnow
from ..database import Base


class ScheduleInstance(Base):
    __tablename__ = "schedule_instances"

    id = Column(Integer, primary_key=True, index=True)
    schedule_id = Column(Integer, ForeignKey("post_schedules.id", ondelete="CASCADE"), nullable=False, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)
    scheduled_for = Column(DateTime, nullable=False, index=True)
    original_scheduled_for = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, approved, sending, sent, failed, skipped
    is_modified = Column(Boolean, nullable=False, default=False)
    skip_reason = Column(Text, nullable=True)
    approved_by = Column(String(200), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    oneup_response = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    schedule = relationship("PostSchedule", back_populates="instances")
    post = relationship("Post")
