"""
Repeating schedule routes: schedule definitions, their instances and the
merged calendar view.
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime

from dateutil.relativedelta import relativedelta

from ..config import get_settings
from ..database import get_db
from ..models.approval import Approval
from ..models.post_schedule import PostSchedule
from ..models.schedule_instance import ScheduleInstance
from ..models.tenant import Tenant
from ..auth import (
    get_required_tenant,
    require_brand,
    require_instance,
    require_post,
    require_schedule,
)
from ..limiter import limiter
from ..logging_config import get_logger
from ..schemas.schedules import ScheduleCreate, ScheduleStatusUpdate, ScheduleApprove, InstanceUpdate
from ..scheduling import service
from ..scheduling.calendar import SOURCE_APPROVAL, SOURCE_SCHEDULE, group_by_date, load_calendar
from ..scheduling.dispatcher import PublishDispatcher
from ..scheduling.errors import ValidationError
from ..timeutils import end_of, to_naive_utc, utcnow
from .schedule import get_dispatcher, tenant_brand_ids

router = APIRouter(prefix="/api/schedules", tags=["schedules"])
settings = get_settings()
logger = get_logger("schedules")


def _iso(value):
    return value.isoformat() if value else None


def instance_to_dict(instance: ScheduleInstance) -> dict:
    """Convert a ScheduleInstance model to a dictionary response."""
    return {
        "id": instance.id,
        "schedule_id": instance.schedule_id,
        "post_id": instance.post_id,
        "brand_id": instance.brand_id,
        "scheduled_for": _iso(instance.scheduled_for),
        "original_scheduled_for": _iso(instance.original_scheduled_for),
        "status": instance.status,
        "is_modified": bool(instance.is_modified),
        "skip_reason": instance.skip_reason,
        "approved_by": instance.approved_by,
        "sent_at": _iso(instance.sent_at),
        "oneup_response": instance.oneup_response,
        "error_message": instance.error_message,
    }


def schedule_to_dict(schedule: PostSchedule, include_instances: bool = False) -> dict:
    """Convert a PostSchedule model (with post info) to a dictionary response."""
    data = {
        "id": schedule.id,
        "post_id": schedule.post_id,
        "brand_id": schedule.brand_id,
        "first_publish_at": _iso(schedule.first_publish_at),
        "repeat_type": schedule.repeat_type,
        "repeat_interval": schedule.repeat_interval,
        "repeat_end_date": _iso(schedule.repeat_end_date),
        "status": schedule.status,
        "created_by": schedule.created_by,
        "notes": schedule.notes,
        "approved_by": schedule.approved_by,
        "approved_at": _iso(schedule.approved_at),
        "post_title": schedule.post.title,
        "post_content": schedule.post.content,
        "post_image": schedule.post.image_filename,
    }
    if include_instances:
        data["instances"] = [instance_to_dict(i) for i in schedule.instances]
    return data


# ============================================================
# CALENDAR INSTANCES
# ============================================================

@router.get("/instances", response_model=dict)
def get_instances(
    brand: str,
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    include_skipped: bool = False,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Merged calendar of repeating instances and one-time scheduled posts."""
    brand_row = require_brand(db, current_tenant, slug=brand)

    range_start = to_naive_utc(start) if start else utcnow()
    range_end = end_of(end) if end else range_start + relativedelta(months=settings.schedule_horizon_months)
    if range_end < range_start:
        raise ValidationError("end must not be before start", {"field": "end"})

    items = load_calendar(db, brand_row.id, range_start, range_end, include_skipped)

    return {
        "instances": [i.to_dict() for i in items],
        "byDate": {day: [i.to_dict() for i in bucket] for day, bucket in group_by_date(items).items()},
        "total": len(items),
        "dateRange": {"start": range_start.isoformat(), "end": range_end.isoformat()},
    }


@router.patch("/instances", response_model=dict)
def update_instance(
    body: InstanceUpdate,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Move an instance to another date/time or change its status."""
    instance = require_instance(db, current_tenant, body.instance_id)
    service.edit_instance(
        db,
        instance,
        scheduled_for=body.scheduled_for,
        status=body.status.value if body.status else None,
        skip_reason=body.skip_reason,
    )
    db.commit()
    db.refresh(instance)

    return {
        "message": "Instance updated successfully",
        "instance": instance_to_dict(instance),
    }


@router.delete("/instances", response_model=dict)
def delete_instance(
    id: str,
    source: Optional[str] = None,
    reason: Optional[str] = None,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """
    Remove an entry from the calendar.

    ``id`` is either a calendar id (``schedule:12`` / ``approval:5``) or a bare
    number with ``source``. Schedule instances are skipped, never deleted;
    approval entries unschedule the post group.
    """
    if ":" in id:
        source, _, raw_id = id.partition(":")
    else:
        raw_id = id
    source = source or SOURCE_SCHEDULE
    try:
        target_id = int(raw_id)
    except ValueError:
        raise ValidationError("id parameter must be numeric", {"field": "id"})

    if source == SOURCE_SCHEDULE:
        instance = require_instance(db, current_tenant, target_id)
        service.skip_instance(db, instance, reason)
        db.commit()
        return {"message": "Instance skipped successfully"}

    if source == SOURCE_APPROVAL:
        approval = db.query(Approval).filter(Approval.id == target_id).first()
        post = require_post(db, current_tenant, approval.post_id if approval else -1)
        affected = service.unschedule_post_group(db, post)
        db.commit()
        return {
            "message": "Post unscheduled successfully",
            "unscheduled_post_ids": [p.id for p in affected],
        }

    raise ValidationError(f"Unknown source '{source}'", {"field": "source"})


@router.get("/ready", response_model=List[dict])
def get_ready_instances(
    brand: Optional[str] = None,
    until: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Pending or approved instances of active schedules."""
    instances = service.ready_instances(db, tenant_brand_ids(db, current_tenant, brand), until)
    return [instance_to_dict(i) for i in instances]


# ============================================================
# APPROVAL / SENDING
# ============================================================

@router.post("/approve", response_model=dict)
@limiter.limit(settings.publish_rate_limit)
def approve(
    request: Request,
    body: ScheduleApprove,
    db: Session = Depends(get_db),
    dispatcher: PublishDispatcher = Depends(get_dispatcher),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Approve a single instance or a whole schedule and send to OneUp."""
    if body.instance_id:
        instance = require_instance(db, current_tenant, body.instance_id)
        result = dispatcher.send_instance(instance, body.approved_by, body.category_id)
        return {
            "message": "Instance approved and sent to OneUp",
            "instance_id": instance.id,
            "oneup_response": result,
        }

    schedule = require_schedule(db, current_tenant, body.schedule_id)
    results = dispatcher.approve_schedule(schedule, body.approved_by, body.category_id)
    return {
        "message": "Schedule approved",
        "schedule_id": schedule.id,
        "results": results,
    }


# ============================================================
# SCHEDULE DEFINITIONS
# ============================================================

@router.get("", response_model=List[dict])
def get_schedules(
    brand: str,
    instances: bool = False,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """All schedules of a brand, optionally with their instances."""
    brand_row = require_brand(db, current_tenant, slug=brand)
    schedules = (
        db.query(PostSchedule)
        .filter(PostSchedule.brand_id == brand_row.id)
        .order_by(PostSchedule.first_publish_at.asc())
        .all()
    )
    return [schedule_to_dict(s, include_instances=instances) for s in schedules]


@router.post("", response_model=dict)
def create_schedule(
    body: ScheduleCreate,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Create a schedule and its instances (six months ahead or until the end date)."""
    brand = require_brand(db, current_tenant, brand_id=body.brand_id)
    post = require_post(db, current_tenant, body.post_id)
    if post.brand_id != brand.id:
        raise ValidationError("Post does not belong to this brand", {"field": "post_id"})

    schedule = service.create_schedule(
        db,
        post,
        first_publish_at=body.start(),
        created_by=body.created_by,
        repeat_type=body.repeat_type.value,
        repeat_interval=body.repeat_interval,
        repeat_end_date=body.repeat_end_date,
        notes=body.notes,
        horizon_months=settings.schedule_horizon_months,
    )
    db.commit()
    db.refresh(schedule)

    instances = [instance_to_dict(i) for i in schedule.instances]
    if not instances:
        logger.warning("Schedule produced no instances", schedule_id=schedule.id)

    return {
        "message": "Schedule created successfully",
        "schedule": schedule_to_dict(schedule),
        "instances": instances,
        "instances_count": len(instances),
    }


@router.patch("/{schedule_id}", response_model=dict)
def update_schedule_status(
    schedule_id: int,
    body: ScheduleStatusUpdate,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Pause, resume or complete a schedule."""
    schedule = require_schedule(db, current_tenant, schedule_id)
    service.set_schedule_status(db, schedule, body.status.value)
    db.commit()
    db.refresh(schedule)

    return {
        "message": f"Schedule {schedule.status}",
        "schedule": schedule_to_dict(schedule),
    }
