"""
Approval model: two-stage review plus one-time scheduling state of a post.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base


class Approval(Base):
    __tablename__ = "approvals"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    # Stage 1: text
    text_status = Column(String(20), default="pending", nullable=False, index=True)  # pending, approved, rejected
    text_rejection_reason = Column(Text, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    # Stage 2: image
    image_status = Column(String(20), default="not_ready", nullable=False)  # not_ready, pending, approved, rejected
    image_rejection_reason = Column(Text, nullable=True)
    image_reviewed_at = Column(DateTime, nullable=True)

    # One-time scheduling
    scheduled_for = Column(DateTime, nullable=True, index=True)
    scheduled_status = Column(String(20), default="not_scheduled", nullable=False, index=True)
    target_platforms = Column(JSON, default=list)  # empty means ALL
    oneup_category_id = Column(Integer, nullable=True)
    publish_error = Column(Text, nullable=True)
    published_at = Column(DateTime, nullable=True)

    # Relationships
    post = relationship("Post", back_populates="approval")
