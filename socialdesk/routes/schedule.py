"""
One-time scheduling routes: schedule, unschedule, publish and repeat posts.

Scheduling and unscheduling apply to the whole group of posts sharing the
same title within a brand.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from ..config import get_settings
from ..database import get_db
from ..models.brand import Brand
from ..models.tenant import Tenant
from ..auth import get_required_tenant, require_brand, require_post
from ..clients.oneup import OneUpClient, get_oneup_client
from ..limiter import limiter
from ..schemas.schedule import ScheduleRequest, PostAction
from ..scheduling import service
from ..scheduling.dispatcher import PublishDispatcher
from .posts import post_to_dict

router = APIRouter(prefix="/api/schedule", tags=["schedule"])
settings = get_settings()


def get_dispatcher(
    db: Session = Depends(get_db),
    client: OneUpClient = Depends(get_oneup_client),
) -> PublishDispatcher:
    return PublishDispatcher(db, client, get_settings())


def tenant_brand_ids(db: Session, tenant: Tenant, brand: Optional[str] = None) -> List[int]:
    if brand:
        return [require_brand(db, tenant, slug=brand).id]
    return [b.id for b in db.query(Brand.id).filter(Brand.tenant_id == tenant.id).all()]


@router.get("", response_model=List[dict])
def get_scheduled_posts(
    status: Optional[str] = None,
    brand: Optional[str] = None,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Posts on the one-time calendar, soonest first."""
    posts = service.scheduled_posts(db, tenant_brand_ids(db, current_tenant, brand), status)
    return [post_to_dict(p) for p in posts]


@router.get("/ready", response_model=List[dict])
def get_ready_posts(
    brand: Optional[str] = None,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Fully approved posts waiting for a date, one per title."""
    posts = service.ready_posts(db, tenant_brand_ids(db, current_tenant, brand))
    return [post_to_dict(p) for p in posts]


@router.post("", response_model=dict)
def schedule_post(
    body: ScheduleRequest,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Schedule a fully approved post and its paired posts."""
    post = require_post(db, current_tenant, body.post_id)
    group = service.schedule_post_group(db, post, body.scheduled_for, body.category_id, body.platforms)
    db.commit()

    return {
        "message": "Post scheduled successfully",
        "data": post_to_dict(post),
        "scheduled_post_ids": [p.id for p in group],
    }


@router.delete("", response_model=dict)
def unschedule_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Take a scheduled post (and its paired posts) off the calendar."""
    post = require_post(db, current_tenant, post_id)
    affected = service.unschedule_post_group(db, post)
    db.commit()

    return {
        "message": "Post unscheduled successfully",
        "unscheduled_post_ids": [p.id for p in affected],
    }


@router.post("/publish", response_model=dict)
@limiter.limit(settings.publish_rate_limit)
def publish_post(
    request: Request,
    body: PostAction,
    db: Session = Depends(get_db),
    dispatcher: PublishDispatcher = Depends(get_dispatcher),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Send a scheduled post to OneUp now."""
    post = require_post(db, current_tenant, body.post_id)
    result = dispatcher.publish_post(post)

    return {
        "message": "Post published to OneUp successfully",
        "oneup_response": result,
    }


@router.post("/repeat", response_model=dict)
def repeat_post(
    body: PostAction,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Make a published (or failed) post schedulable again."""
    post = require_post(db, current_tenant, body.post_id)
    affected = service.repeat_post(db, post)
    db.commit()
    db.refresh(post)

    return {
        "message": "Post marked for reposting",
        "reset_post_ids": [p.id for p in affected],
        "data": post_to_dict(post),
    }
