"""
Website routes: the tenant's sites and their topical maps from the content API.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ..database import get_db
from ..models.tenant import Tenant
from ..models.website import Website
from ..auth import get_required_tenant, require_website
from ..clients.content_research import ContentResearchClient, get_content_research_client

router = APIRouter(prefix="/api/websites", tags=["websites"])


def website_to_dict(website: Website) -> dict:
    return {
        "id": website.id,
        "name": website.name,
        "domain": website.domain,
    }


@router.get("", response_model=List[dict])
def get_websites(
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    websites = db.query(Website).filter(Website.tenant_id == current_tenant.id).order_by(Website.name).all()
    return [website_to_dict(w) for w in websites]


@router.get("/{website_id}/content", response_model=dict)
def get_website_content(
    website_id: int,
    db: Session = Depends(get_db),
    client: ContentResearchClient = Depends(get_content_research_client),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Read-only topical map for one of the tenant's websites."""
    website = require_website(db, current_tenant, website_id)
    return {
        "website": website_to_dict(website),
        "content": client.get_website_content(website.domain),
    }
