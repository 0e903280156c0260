"""
Brand model: a client of a tenant owning its own posts and schedules.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from ..timeutils import utcnow
from ..database import Base


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    slug = Column(String(100), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=False)
    oneup_category_id = Column(Integer, nullable=True)  # default OneUp category
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    tenant = relationship("Tenant", back_populates="brands")
    posts = relationship("Post", back_populates="brand", cascade="all, delete-orphan")
    schedules = relationship("PostSchedule", back_populates="brand", cascade="all, delete-orphan")
