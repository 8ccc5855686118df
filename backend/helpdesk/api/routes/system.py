"""
System Owner Routes

Super admin lifecycle and system reports. Every route requires SYSTEM_OWNER.
"""

from fastapi import APIRouter, Depends, status

from ..deps import get_current_user_dep, get_services, require_roles
from ...domain.models import ActorContext
from ...domain.enums import Role, AuditAction
from ...services.container import ServiceContainer
from ...services.user_service import SUPER_ADMIN_ROLES
from ...utils.time import format_iso
from .schemas import CreateSuperAdminRequest, ExpiryRequest, user_out

router = APIRouter(dependencies=[Depends(require_roles(Role.SYSTEM_OWNER))])


@router.post("/superadmin", status_code=status.HTTP_201_CREATED)
async def create_super_admin(
    body: CreateSuperAdminRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    """Create a SUPER_ADMIN with an account expiring in 30 days"""
    user = services.users.create_user(
        actor,
        username=body.username,
        email=body.email,
        password=body.password,
        role=Role.SUPER_ADMIN,
        location=body.location,
        business_type=body.business_type
    )
    account = services.user_repo.get_account(user.user_id)
    return {
        "message": "Super Admin created successfully",
        "user": user_out(user),
        "expiry_date": format_iso(account.expiry_date) if account else None
    }


@router.put("/superadmin/{user_id}/expiry")
async def update_super_admin_expiry(
    user_id: str,
    body: ExpiryRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    account = services.users.update_super_admin_expiry(actor, user_id, body.expiry_date)
    return {
        "message": "Super Admin expiry date updated successfully",
        "expiry_date": format_iso(account.expiry_date)
    }


@router.delete("/superadmin/{user_id}")
async def delete_super_admin(
    user_id: str,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    """Delete the super admin's account record, then the user"""
    services.users.delete_user(
        actor, user_id,
        allowed_roles=SUPER_ADMIN_ROLES,
        action=AuditAction.SUPER_ADMIN_DELETED
    )
    return {"message": "Super Admin deleted successfully"}


@router.get("/reports")
async def system_reports(services: ServiceContainer = Depends(get_services)):
    return services.reports.system_report()
