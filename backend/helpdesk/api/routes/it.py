"""
IT Person Routes

Work queue for IT_PERSON. Every route requires the IT_PERSON role.
"""

from fastapi import APIRouter, Depends, status

from ..deps import get_current_user_dep, get_services, require_roles
from ...domain.models import ActorContext
from ...domain.enums import Role, TicketStatus
from ...services.container import ServiceContainer
from .schemas import (
    CreateUserRequest, RaiseTicketRequest, AddNoteRequest,
    user_out, ticket_out, tickets_out, note_out
)

router = APIRouter(dependencies=[Depends(require_roles(Role.IT_PERSON))])


@router.post("/user", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: CreateUserRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    user = services.users.create_user(
        actor,
        username=body.username,
        email=body.email,
        password=body.password,
        role=body.role or Role.USER,
        location=body.location
    )
    return {"message": "User created successfully", "user": user_out(user)}


@router.get("/tickets")
async def assigned_tickets(
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    return tickets_out(services.tickets.list_assigned(actor))


@router.put("/tickets/{ticket_id}/close")
async def close_ticket(
    ticket_id: str,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    """Mark an assigned ticket SOLVED"""
    return ticket_out(services.tickets.close(actor, ticket_id, TicketStatus.SOLVED))


@router.post("/tickets/{ticket_id}/notes", status_code=status.HTTP_201_CREATED)
async def add_note(
    ticket_id: str,
    body: AddNoteRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    return note_out(services.tickets.add_note(actor, ticket_id, body.note))


@router.post("/tickets/raise", status_code=status.HTTP_201_CREATED)
async def raise_ticket(
    body: RaiseTicketRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    """Raise a ticket on behalf of a user; the caller becomes the assignee"""
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
