"""
Post model for brand social content (caption + image).
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from ..timeutils import utcnow
from ..database import Base


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)
    post_index = Column(Integer, nullable=False, default=0)
    title = Column(String(300), nullable=False, index=True)
    platform = Column(String(50), nullable=False, default="social")
    content = Column(Text, nullable=False)
    image_filename = Column(String(500), nullable=True)  # file name under /images or absolute URL
    is_duplicate = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    brand = relationship("Brand", back_populates="posts")
    approval = relationship("Approval", back_populates="post", uselist=False, cascade="all, delete-orphan")
    schedules = relationship("PostSchedule", back_populates="post", cascade="all, delete-orphan")
