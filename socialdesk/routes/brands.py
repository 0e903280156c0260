"""
Tenant and brand lookup routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ..database import get_db
from ..models.brand import Brand
from ..models.tenant import Tenant
from ..auth import get_required_tenant, require_brand

router = APIRouter(prefix="/api", tags=["brands"])


def brand_to_dict(brand: Brand) -> dict:
    return {
        "id": brand.id,
        "slug": brand.slug,
        "name": brand.name,
        "oneup_category_id": brand.oneup_category_id,
    }


@router.get("/tenant", response_model=dict)
def get_tenant(current_tenant: Tenant = Depends(get_required_tenant)):
    """Get the authenticated tenant."""
    return {
        "id": current_tenant.id,
        "subdomain": current_tenant.subdomain,
        "name": current_tenant.name,
        "email": current_tenant.email,
    }


@router.get("/brands", response_model=List[dict])
def get_brands(
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """List the tenant's brands by name."""
    brands = db.query(Brand).filter(Brand.tenant_id == current_tenant.id).order_by(Brand.name).all()
    return [brand_to_dict(b) for b in brands]


@router.get("/brands/{slug}", response_model=dict)
def get_brand(
    slug: str,
    db: Session = Depends(get_db),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    return brand_to_dict(require_brand(db, current_tenant, slug=slug))
