"""
Tenant authentication and resource ownership checks.

Tokens are issued by the identity provider in front of the dashboard; this
service only verifies them. The ``sub`` claim carries the tenant id.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models.tenant import Tenant
from .models.brand import Brand
from .models.post import Post
from .models.post_schedule import PostSchedule
from .models.schedule_instance import ScheduleInstance
from .models.website import Website
from .config import get_settings
from .scheduling.errors import NotFoundError, TenantMismatchError, ValidationError

settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed tenant token."""
    to_encode = data.copy()
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])  # JWT sub claim must be a string
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str) -> Optional[dict]:
    """Verify a token and return its payload."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if payload.get("type", "access") != "access":
        return None
    return payload


def get_current_tenant(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[Tenant]:
    """Resolve the tenant from the bearer token (optional auth)."""
    if not token:
        return None

    payload = verify_token(token)
    if not payload:
        return None

    try:
        tenant_id = int(payload.get("sub"))
    except (ValueError, TypeError):
        return None

    return db.query(Tenant).filter(Tenant.id == tenant_id, Tenant.is_active.is_(True)).first()


def get_required_tenant(
    current_tenant: Optional[Tenant] = Depends(get_current_tenant)
) -> Tenant:
    """Get the current tenant, raising 401 if not authenticated."""
    if not current_tenant:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_tenant


# ============================================================
# OWNERSHIP
# ============================================================

def _check_owner(brand: Brand, tenant: Tenant) -> None:
    if brand.tenant_id != tenant.id:
        raise TenantMismatchError("Brand does not belong to this tenant", {"brand_id": brand.id})


def require_brand(db: Session, tenant: Tenant, brand_id: Optional[int] = None, slug: Optional[str] = None) -> Brand:
    """Load a brand by id or slug and make sure the tenant owns it."""
    if brand_id is None and not slug:
        raise ValidationError("brand parameter required", {"field": "brand"})

    query = db.query(Brand)
    brand = query.filter(Brand.id == brand_id).first() if brand_id is not None else query.filter(Brand.slug == slug).first()
    if not brand:
        raise NotFoundError("Brand", brand_id if brand_id is not None else slug)
    _check_owner(brand, tenant)
    return brand


def require_post(db: Session, tenant: Tenant, post_id: int) -> Post:
    post = db.query(Post).filter(Post.id == post_id).first()
    if not post:
        raise NotFoundError("Post", post_id)
    _check_owner(post.brand, tenant)
    return post


def require_schedule(db: Session, tenant: Tenant, schedule_id: int) -> PostSchedule:
    schedule = db.query(PostSchedule).filter(PostSchedule.id == schedule_id).first()
    if not schedule:
        raise NotFoundError("Schedule", schedule_id)
    _check_owner(schedule.brand, tenant)
    return schedule


def require_instance(db: Session, tenant: Tenant, instance_id: int) -> ScheduleInstance:
    instance = db.query(ScheduleInstance).filter(ScheduleInstance.id == instance_id).first()
    if not instance:
        raise NotFoundError("Instance", instance_id)
    _check_owner(instance.schedule.brand, tenant)
    return instance


def require_website(db: Session, tenant: Tenant, website_id: int) -> Website:
    website = db.query(Website).filter(Website.id == website_id).first()
    if not website:
        raise NotFoundError("Website", website_id)
    if website.tenant_id != tenant.id:
        raise TenantMismatchError("Website does not belong to this tenant", {"website_id": website_id})
    return website
