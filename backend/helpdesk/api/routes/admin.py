"""
Admin Routes

Account and ticket management for ADMIN. Every route requires the ADMIN role.
"""

from datetime import datetime
from fastapi import APIRouter, Depends, Query, status

from ..deps import get_current_user_dep, get_services, require_roles
from ...domain.models import ActorContext
from ...domain.enums import Role, AuditAction
from ...services.container import ServiceContainer
from ...utils.time import to_naive_utc
from .schemas import CreateUserRequest, user_out, users_out, tickets_out

router = APIRouter(dependencies=[Depends(require_roles(Role.ADMIN))])


@router.post("/user", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: CreateUserRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    """Create an IT_PERSON or USER (defaults to USER)"""
    user = services.users.create_user(
        actor,
        username=body.username,
        email=body.email,
        password=body.password,
        role=body.role or Role.USER,
        location=body.location,
        business_type=body.business_type
    )
    return {"message": "User created successfully", "user": user_out(user)}


@router.get("/users")
async def users_under_admin(
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    """IT persons and users"""
    return {key: users_out(users) for key, users in services.users.list_managed(actor).items()}


@router.delete("/user/{user_id}")
async def delete_user(
    user_id: str,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    services.users.delete_user(
        actor, user_id,
        allowed_roles=(Role.IT_PERSON, Role.USER),
        action=AuditAction.USER_DELETED
    )
    return {"message": "User deleted successfully"}


@router.get("/tickets")
async def all_tickets(services: ServiceContainer = Depends(get_services)):
    return tickets_out(services.tickets.list_tickets())


@router.get("/tickets/filter")
async def tickets_by_date(
    date_from: datetime = Query(..., alias="from"),
    date_to: datetime = Query(..., alias="to"),
    services: ServiceContainer = Depends(get_services)
):
    """Tickets created in [from, to]"""
    return tickets_out(services.tickets.list_tickets(
        created_from=to_naive_utc(date_from),
        created_to=to_naive_utc(date_to)
    ))
