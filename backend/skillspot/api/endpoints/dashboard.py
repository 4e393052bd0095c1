from typing import Optional

from fastapi import APIRouter

from ...models.organization import Organization
from ...services import dashboard as dashboard_service
from ...services.organizations import admin_organization
from ..deps import AdminUser, StoreDep

router = APIRouter()


@router.get("/admin/stats")
async def admin_stats(store: StoreDep, admin: AdminUser):
    return await dashboard_service.admin_stats(store)


@router.get("/admin/ngo", response_model=Optional[Organization])
def my_ngo(store: StoreDep, admin: AdminUser):
    """The NGO this admin manages, or null if it no longer exists."""
    return admin_organization(store, admin)
