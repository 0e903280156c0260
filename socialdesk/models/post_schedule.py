"""
PostSchedule model: a repeating publication definition for a post.
"""
from sqlalchemy import Column, Integer, String, DateTime, Date, Text, ForeignKey
from sqlalchemy.orm import relationship
from ..timeutils import utcnow
from ..database import Base


class PostSchedule(Base):
    __tablename__ = "post_schedules"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)
    first_publish_at = Column(DateTime, nullable=False)
    repeat_type = Column(String(20), nullable=False, default="none")  # none, weekly, biweekly, monthly, custom
    repeat_interval = Column(Integer, nullable=True)  # days, custom only
    repeat_end_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="pending_approval", index=True)
    created_by = Column(String(200), nullable=False)
    notes = Column(Text, nullable=True)
    approved_by = Column(String(200), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    post = relationship("Post", back_populates="schedules")
    brand = relationship("Brand", back_populates="schedules")
    instances = relationship(
        "ScheduleInstance",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="ScheduleInstance.scheduled_for",
    )
