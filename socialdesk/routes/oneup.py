"""
OneUp lookups: categories and the accounts connected to them.
"""
from fastapi import APIRouter, Depends
from typing import List

from ..models.tenant import Tenant
from ..auth import get_required_tenant
from ..clients.oneup import OneUpClient, get_oneup_client

router = APIRouter(prefix="/api/oneup", tags=["oneup"])


@router.get("/categories", response_model=List[dict])
def get_categories(
    client: OneUpClient = Depends(get_oneup_client),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    """Categories available to the configured OneUp account."""
    return client.list_categories()


@router.get("/categories/{category_id}/accounts", response_model=List[dict])
def get_category_accounts(
    category_id: int,
    client: OneUpClient = Depends(get_oneup_client),
    current_tenant: Tenant = Depends(get_required_tenant),
):
    return client.list_category_accounts(category_id)
