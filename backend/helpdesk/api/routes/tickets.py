"""
Ticket Routes

Creation, listing, transitions and notes for tickets.
"""

from typing import Optional
from fastapi import APIRouter, Body, Depends, Query, status

from ..deps import get_current_user_dep, get_services, require_roles
from ...domain.models import ActorContext
from ...domain.enums import Role
from ...domain.errors import ForbiddenError
from ...engine.ticket_lifecycle import STAFF_ROLES
from ...services.container import ServiceContainer
from ...utils.logger import get_logger
from .schemas import (
    CreateTicketRequest, UpdateStatusRequest, AssignRequest, CloseTicketRequest,
    AddNoteRequest, ticket_out, tickets_out, note_out
)

logger = get_logger(__name__)
router = APIRouter()

TRIAGE = (Role.ADMIN, Role.IT_PERSON)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_ticket(
    body: CreateTicketRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    """
    Create a ticket

    USER files for themselves. IT_PERSON must pass user_id and is
    assigned the ticket.
    """
    ticket = services.tickets.create_ticket(
        actor,
        title=body.title,
        category=body.category,
        description=body.description,
        priority=body.priority,
        ip_address=body.ip_address,
        device_name=body.device_name,
        on_behalf_of=body.user_id
    )
    return ticket_out(ticket)


@router.get("")
async def list_tickets(
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    actor: ActorContext = Depends(require_roles(*TRIAGE)),
    services: ServiceContainer = Depends(get_services)
):
    """List tickets with optional filters"""
    return tickets_out(services.tickets.list_tickets(
        status=status_filter, priority=priority, category=category
    ))


@router.get("/assigned")
async def assigned_tickets(
    actor: ActorContext = Depends(require_roles(Role.IT_PERSON)),
    services: ServiceContainer = Depends(get_services)
):
    """Tickets assigned to the calling IT person"""
    return tickets_out(services.tickets.list_assigned(actor))


@router.get("/status/{ticket_status}")
async def tickets_by_status(
    ticket_status: str,
    actor: ActorContext = Depends(require_roles(*TRIAGE)),
    services: ServiceContainer = Depends(get_services)
):
    return tickets_out(services.tickets.list_tickets(status=ticket_status))


@router.get("/priority/{priority}")
async def tickets_by_priority(
    priority: str,
    actor: ActorContext = Depends(require_roles(*TRIAGE)),
    services: ServiceContainer = Depends(get_services)
):
    return tickets_out(services.tickets.list_tickets(priority=priority))


@router.get("/category/{category}")
async def tickets_by_category(
    category: str,
    actor: ActorContext = Depends(require_roles(*TRIAGE)),
    services: ServiceContainer = Depends(get_services)
):
    return tickets_out(services.tickets.list_tickets(category=category))


@router.get("/user/{user_id}")
async def tickets_by_user(
    user_id: str,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    """A user's tickets; visible to staff and to the user themselves"""
    if actor.user_id != user_id and Role(actor.role) not in STAFF_ROLES:
        raise ForbiddenError("Access denied", details={"user_id": user_id})
    return tickets_out(services.tickets.list_tickets(user_id=user_id))


@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: str,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    return ticket_out(services.tickets.get_ticket(actor, ticket_id))


@router.patch("/{ticket_id}/status")
async def update_status(
    ticket_id: str,
    body: UpdateStatusRequest,
    actor: ActorContext = Depends(require_roles(*TRIAGE)),
    services: ServiceContainer = Depends(get_services)
):
    """Set status to PENDING or OPEN; closing and reopening have their own routes"""
    return ticket_out(services.tickets.update_status(actor, ticket_id, body.status))


@router.post("/{ticket_id}/assign")
async def assign_ticket(
    ticket_id: str,
    body: AssignRequest,
    actor: ActorContext = Depends(require_roles(*TRIAGE)),
    services: ServiceContainer = Depends(get_services)
):
    return ticket_out(services.tickets.assign(actor, ticket_id, body.assigned_to))


@router.post("/{ticket_id}/notes", status_code=status.HTTP_201_CREATED)
async def add_note(
    ticket_id: str,
    body: AddNoteRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    """Append a note (staff only; IT persons on their assigned tickets)"""
    return note_out(services.tickets.add_note(actor, ticket_id, body.note))


@router.get("/{ticket_id}/notes")
async def get_notes(
    ticket_id: str,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    return [note_out(n) for n in services.tickets.get_notes(actor, ticket_id)]


@router.post("/{ticket_id}/close")
async def close_ticket(
    ticket_id: str,
    body: Optional[CloseTicketRequest] = Body(None),
    actor: ActorContext = Depends(require_roles(Role.ADMIN, Role.SUPER_ADMIN, Role.IT_PERSON)),
    services: ServiceContainer = Depends(get_services)
):
    """Close a ticket (default status CLOSED)"""
    body = body or CloseTicketRequest()
    return ticket_out(services.tickets.close(actor, ticket_id, body.status))


@router.post("/{ticket_id}/reopen")
async def reopen_ticket(
    ticket_id: str,
    actor: ActorContext = Depends(require_roles(*TRIAGE)),
    services: ServiceContainer = Depends(get_services)
):
    return ticket_out(services.tickets.reopen(actor, ticket_id))


@router.delete("/{ticket_id}")
async def delete_ticket(
    ticket_id: str,
    actor: ActorContext = Depends(require_roles(Role.ADMIN, Role.SUPER_ADMIN)),
    services: ServiceContainer = Depends(get_services)
):
    services.tickets.delete(actor, ticket_id)
    return {"message": "Ticket deleted successfully"}
