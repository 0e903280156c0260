"""
Posts routes: brand content with its approval state.
"""
from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional

from ..database import get_db
from ..models.approval import Approval
from ..models.brand import Brand
from ..models.post import Post
from ..models.tenant import Tenant
from ..auth import get_required_tenant, require_brand, require_post
from ..schemas.posts import PostCreate, PostUpdate
from ..scheduling import service
from ..scheduling.states import ScheduledStatus

router = APIRouter(prefix="/api/posts", tags=["posts"])


def _iso(value):
    return value.isoformat() if value else None


def approval_to_dict(approval: Optional[Approval]) -> Optional[dict]:
    """Convert an Approval model to a dictionary response."""
    if approval is None:
        return None
    return {
        "id": approval.id,
        "post_id": approval.post_id,
        "status": approval.text_status,
        "rejection_reason": approval.text_rejection_reason,
        "reviewed_at": _iso(approval.reviewed_at),
        "image_status": approval.image_status,
        "image_rejection_reason": approval.image_rejection_reason,
        "image_reviewed_at": _iso(approval.image_reviewed_at),
        "scheduled_for": _iso(approval.scheduled_for),
        "scheduled_status": approval.scheduled_status,
        "oneup_category_id": approval.oneup_category_id,
        "target_platforms": approval.target_platforms or [],
        "publish_error": approval.publish_error,
        "published_at": _iso(approval.published_at),
    }


def post_to_dict(post: Post) -> dict:
    """Convert a Post model (with its approval) to a dictionary response."""
    return {
        "id": post.id,
        "brand_id": post.brand_id,
        "post_index": post.post_index,
        "title": post.title,
        "platform": post.platform,
        "content": post.content,
        "image_filename": post.image_filename,
        "is_duplicate": bool(post.is_duplicate),
        "created_at": _iso(post.created_at),
        "approval": approval_to_dict(post.approval),
    }


@router.get("", response_model=List[dict])
def get_posts(
    brand: Optional[str] = None,
    include_posted: bool = False,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """List the tenant's posts, newest first, hiding duplicates and published posts."""
    query = db.query(Post).join(Brand, Brand.id == Post.brand_id).outerjoin(Approval, Approval.post_id == Post.id)

    if brand:
        query = query.filter(Post.brand_id == require_brand(db, current_tenant, slug=brand).id)
    else:
        query = query.filter(Brand.tenant_id == current_tenant.id)

    query = query.filter(or_(Post.is_duplicate.is_(False), Post.is_duplicate.is_(None)))
    if not include_posted:
        query = query.filter(or_(
            Approval.scheduled_status.is_(None),
            Approval.scheduled_status != ScheduledStatus.PUBLISHED.value,
        ))

    posts = query.order_by(Post.created_at.desc(), Post.id.desc()).all()
    return [post_to_dict(p) for p in posts]


@router.get("/{post_id}", response_model=dict)
def get_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Get a single post by ID (must belong to one of the tenant's brands)."""
    return post_to_dict(require_post(db, current_tenant, post_id))


@router.post("", response_model=dict)
def create_post(
    post_data: PostCreate,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Create a post together with its approval record."""
    brand = require_brand(db, current_tenant, brand_id=post_data.brand_id)
    post = service.create_post(
        db,
        brand,
        title=post_data.title,
        content=post_data.content,
        image_filename=post_data.image_filename,
        approve_text=post_data.approve_text,
    )
    db.commit()
    db.refresh(post)

    return post_to_dict(post)


@router.patch("/{post_id}", response_model=dict)
def update_post(
    post_id: int,
    post_update: PostUpdate,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Edit a post; changing title or caption sends it back to text review."""
    post = require_post(db, current_tenant, post_id)
    service.edit_post(db, post, **post_update.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(post)

    return post_to_dict(post)
