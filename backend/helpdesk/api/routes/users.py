"""
User Routes

Self-service ticket views for USER accounts, plus user administration.
"""

from fastapi import APIRouter, Depends, status

from ..deps import get_current_user_dep, get_services, require_roles
from ...domain.models import ActorContext
from ...domain.enums import Role
from ...domain.errors import TicketNotFoundError
from ...services.container import ServiceContainer
from ...utils.time import format_iso
from .schemas import (
    CreateTicketRequest, UpdateUserRequest, ChangeRoleRequest, BusinessTypeRequest,
    ticket_out, user_out, users_out
)

router = APIRouter()


# =============================================================================
# Own tickets (USER)
# =============================================================================

@router.post("/tickets", status_code=status.HTTP_201_CREATED)
async def create_my_ticket(
    body: CreateTicketRequest,
    actor: ActorContext = Depends(require_roles(Role.USER)),
    services: ServiceContainer = Depends(get_services)
):
    ticket = services.tickets.create_ticket(
        actor,
        title=body.title,
        category=body.category,
        description=body.description,
        priority=body.priority,
        ip_address=body.ip_address,
        device_name=body.device_name
    )
    return ticket_out(ticket)


@router.get("/tickets")
async def my_tickets(
    actor: ActorContext = Depends(require_roles(Role.USER)),
    services: ServiceContainer = Depends(get_services)
):
    """The caller's tickets, newest first, each with its notes"""
    return services.tickets.list_with_notes(actor.user_id)


@router.get("/tickets/{ticket_id}/status")
async def my_ticket_status(
    ticket_id: str,
    actor: ActorContext = Depends(require_roles(Role.USER)),
    services: ServiceContainer = Depends(get_services)
):
    ticket = services.ticket_repo.get_ticket(ticket_id)
    if not ticket or ticket.user_id != actor.user_id:
        raise TicketNotFoundError("Ticket not found", details={"ticket_id": ticket_id})
    return {
        "ticket_id": ticket.ticket_id,
        "status": ticket.status,
        "updated_at": format_iso(ticket.updated_at),
        "closed_at": format_iso(ticket.closed_at) if ticket.closed_at else None,
    }


# =============================================================================
# Administration
# =============================================================================

@router.get("")
async def list_users(
    actor: ActorContext = Depends(require_roles(Role.ADMIN, Role.SUPER_ADMIN)),
    services: ServiceContainer = Depends(get_services)
):
    return users_out(services.users.list_users())


@router.get("/role/{role}")
async def users_by_role(
    role: str,
    actor: ActorContext = Depends(require_roles(Role.ADMIN)),
    services: ServiceContainer = Depends(get_services)
):
    return users_out(services.users.list_users(roles=[role]))


@router.get("/business-type/{business_type}")
async def users_by_business_type(
    business_type: str,
    actor: ActorContext = Depends(require_roles(Role.ADMIN)),
    services: ServiceContainer = Depends(get_services)
):
    return users_out(services.users.list_by_business_type(business_type))


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    return user_out(services.users.get_user(actor, user_id))


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    body: UpdateUserRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    user = services.users.update_user(actor, user_id, email=body.email, password=body.password)
    return user_out(user)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    actor: ActorContext = Depends(require_roles(Role.SUPER_ADMIN)),
    services: ServiceContainer = Depends(get_services)
):
    services.users.delete_user(actor, user_id)
    return {"message": "User deleted successfully"}


@router.patch("/{user_id}/role")
async def change_role(
    user_id: str,
    body: ChangeRoleRequest,
    actor: ActorContext = Depends(require_roles(Role.SUPER_ADMIN)),
    services: ServiceContainer = Depends(get_services)
):
    """The caller must outrank both the current and the new role"""
    return user_out(services.users.change_role(actor, user_id, body.role))


@router.patch("/{user_id}/business-type")
async def set_business_type(
    user_id: str,
    body: BusinessTypeRequest,
    actor: ActorContext = Depends(require_roles(Role.ADMIN)),
    services: ServiceContainer = Depends(get_services)
):
    return user_out(services.users.set_business_type(actor, user_id, body.business_type))


@router.get("/{user_id}/audit-logs")
async def user_audit_logs(
    user_id: str,
    actor: ActorContext = Depends(require_roles(Role.ADMIN)),
    services: ServiceContainer = Depends(get_services)
):
    return [e.model_dump(mode="json") for e in services.users.get_audit_logs(user_id)]


@router.get("/{user_id}/login-history")
async def user_login_history(
    user_id: str,
    actor: ActorContext = Depends(require_roles(Role.ADMIN)),
    services: ServiceContainer = Depends(get_services)
):
    return [r.model_dump(mode="json") for r in services.users.get_login_history(user_id)]
