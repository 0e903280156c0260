"""
Tenant model: the agency account boundary.
"""
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from ..timeutils import utcnow
from ..database import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, index=True)
    subdomain = Column(String(100), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    brands = relationship("Brand", back_populates="tenant", cascade="all, delete-orphan")
    websites = relationship("Website", back_populates="tenant", cascade="all, delete-orphan")
