"""
Approval routes: stage 1 (text) and stage 2 (image) review decisions.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.tenant import Tenant
from ..auth import get_required_tenant, require_post
from ..logging_config import get_logger
from ..schemas.approval import TextDecision, ImageDecision
from ..scheduling import service, state_machine
from .posts import approval_to_dict

router = APIRouter(prefix="/api", tags=["approvals"])
logger = get_logger("approvals")


@router.post("/approvals", response_model=dict)
def decide_text(
    decision: TextDecision,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Approve, reject (reason required) or reopen a post's text."""
    post = require_post(db, current_tenant, decision.post_id)
    approval = service.approval_for(db, post)

    with service.unit_of_work(db):
        state_machine.decide_text(approval, decision.status, decision.rejection_reason)
    db.commit()
    db.refresh(approval)

    logger.info("Text decision", post_id=post.id, status=approval.text_status)
    return approval_to_dict(approval)


@router.post("/image-approvals", response_model=dict)
def decide_image(
    decision: ImageDecision,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Approve or reject a post's image; the text must be approved first."""
    post = require_post(db, current_tenant, decision.post_id)
    approval = service.approval_for(db, post)

    with service.unit_of_work(db):
        state_machine.decide_image(approval, decision.image_status, decision.image_rejection_reason)
    db.commit()
    db.refresh(approval)

    logger.info("Image decision", post_id=post.id, image_status=approval.image_status)
    return approval_to_dict(approval)
