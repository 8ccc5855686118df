"""
Super Admin Routes

Admin management and ticket overview. Every route requires SUPER_ADMIN.
"""

from datetime import datetime
from fastapi import APIRouter, Depends, Query, status

from ..deps import get_current_user_dep, get_services, require_roles
from ...domain.models import ActorContext
from ...domain.enums import Role, AuditAction
from ...services.container import ServiceContainer
from ...utils.time import to_naive_utc
from .schemas import CreateUserRequest, user_out, users_out, tickets_out

router = APIRouter(dependencies=[Depends(require_roles(Role.SUPER_ADMIN))])


@router.post("/admin", status_code=status.HTTP_201_CREATED)
async def create_admin(
    body: CreateUserRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    """Create an ADMIN; any other requested role is refused by the hierarchy"""
    user = services.users.create_user(
        actor,
        username=body.username,
        email=body.email,
        password=body.password,
        role=body.role or Role.ADMIN,
        location=body.location
    )
    return {"message": "Admin created successfully", "user": user_out(user)}


@router.delete("/admin/{user_id}")
async def delete_admin(
    user_id: str,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    services.users.delete_user(
        actor, user_id,
        allowed_roles=(Role.ADMIN,),
        action=AuditAction.ADMIN_DELETED
    )
    return {"message": "Admin deleted successfully"}


@router.get("/users")
async def users_under_super_admin(
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    """Admins, IT persons and users"""
    return {key: users_out(users) for key, users in services.users.list_managed(actor).items()}


@router.get("/tickets")
async def all_tickets(services: ServiceContainer = Depends(get_services)):
    return tickets_out(services.tickets.list_tickets())


@router.get("/tickets/filter")
async def tickets_by_date(
    date_from: datetime = Query(..., alias="from"),
    date_to: datetime = Query(..., alias="to"),
    services: ServiceContainer = Depends(get_services)
):
    return tickets_out(services.tickets.list_tickets(
        created_from=to_naive_utc(date_from),
        created_to=to_naive_utc(date_to)
    ))
