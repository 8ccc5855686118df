"""Ticket Lifecycle Engine - Ticket state machine with per-role guards

States: PENDING -> OPEN -> SOLVED | CLOSED -> (reopen) -> OPEN
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Type
from enum import Enum

from ..domain.models import Ticket, TicketNote, ActorContext
from ..domain.enums import (
    Role, TicketStatus, TicketPriority, TicketCategory, AuditAction,
    ACTIVE_STATUSES, TERMINAL_STATUSES
)
from ..domain.errors import ForbiddenError, TicketNotFoundError, ValidationError
from ..repositories.ticket_repo import TicketRepository
from ..repositories.user_repo import UserRepository
from .audit_writer import AuditWriter
from .authorization import AuthorizationPolicy
from ..utils.idgen import generate_ticket_id, generate_note_id
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)

STAFF_ROLES = (Role.SYSTEM_OWNER, Role.SUPER_ADMIN, Role.ADMIN, Role.IT_PERSON)
TRANSITION_ROLES = (Role.ADMIN, Role.IT_PERSON)
CLOSE_ANY_ROLES = (Role.ADMIN, Role.SUPER_ADMIN)
DELETE_ROLES = (Role.ADMIN, Role.SUPER_ADMIN)


def parse_enum(enum_cls: Type[Enum], value: Any, field: str) -> Enum:
    """Coerce an input value to an enum member or raise ValidationError"""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = [m.value for m in enum_cls]
        raise ValidationError(
            f"Invalid {field}: {value}",
            details={"field": field, "allowed": allowed}
        )


class TicketLifecycleEngine:
    """
    Ticket state machine

    Each mutating method does the primary write first, then a best-effort
    audit write. Audit failures never undo the mutation.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        user_repo: UserRepository,
        audit_writer: AuditWriter,
        policy: Optional[AuthorizationPolicy] = None
    ):
        self.ticket_repo = ticket_repo
        self.user_repo = user_repo
        self.audit = audit_writer
        self.policy = policy or AuthorizationPolicy()

    # =========================================================================
    # Creation
    # =========================================================================

    def create_ticket(
        self,
        actor: ActorContext,
        title: str,
        category: Any,
        description: Optional[str] = None,
        priority: Any = None,
        ip_address: Optional[str] = None,
        device_name: Optional[str] = None,
        on_behalf_of: Optional[str] = None
    ) -> Ticket:
        """
        Create a ticket in PENDING

        USER creates for self. IT_PERSON creates on behalf of an existing
        user and becomes the assignee.
        """
        self.policy.require_route(actor.role, (Role.USER, Role.IT_PERSON))

        if not title or not title.strip():
            raise ValidationError("Title is required", details={"field": "title"})
        if category is None:
            raise ValidationError("Category is required", details={"field": "category"})

        category = parse_enum(TicketCategory, category, "category")
        priority = parse_enum(TicketPriority, priority, "priority") if priority else TicketPriority.MEDIUM

        if Role(actor.role) == Role.IT_PERSON:
            if not on_behalf_of:
                raise ValidationError("Target user is required", details={"field": "user_id"})
            owner_id = self.user_repo.get_user_or_raise(on_behalf_of).user_id
            assigned_to = actor.user_id
        else:
            owner_id = actor.user_id
            assigned_to = None

        now = utc_now()
        ticket = Ticket(
            ticket_id=generate_ticket_id(),
            title=title.strip(),
            description=description or "",
            category=category,
            priority=priority,
            status=TicketStatus.PENDING,
            user_id=owner_id,
            assigned_to=assigned_to,
            ip_address=ip_address,
            device_name=device_name,
            created_at=now,
            updated_at=now
        )
        self.ticket_repo.create_ticket(ticket)

        self.audit.record(
            AuditAction.TICKET_CREATED,
            actor.user_id,
            {"ticket_id": ticket.ticket_id, "owner": owner_id}
        )
        logger.info(
            f"Ticket {ticket.ticket_id} created by {actor.username}",
            extra={"ticket_id": ticket.ticket_id, "user_id": actor.user_id}
        )
        return ticket

    # =========================================================================
    # Transitions
    # =========================================================================

    def assign(self, actor: ActorContext, ticket_id: str, assignee_id: str) -> Ticket:
        """Set assigned_to; the assignee only has to exist"""
        self.policy.require_route(actor.role, TRANSITION_ROLES)
        self.ticket_repo.get_ticket_or_raise(ticket_id)
        assignee = self.user_repo.get_user_or_raise(assignee_id)

        ticket = self.ticket_repo.update_ticket(ticket_id, {"assigned_to": assignee.user_id})

        self.audit.record(
            AuditAction.TICKET_ASSIGNED,
            actor.user_id,
            {"ticket_id": ticket_id, "assigned_to": assignee.user_id}
        )
        return ticket

    def update_status(self, actor: ActorContext, ticket_id: str, status: Any) -> Ticket:
        """
        Move an active ticket between PENDING and OPEN

        SOLVED and CLOSED go through close(), and a terminal ticket comes
        back only through reopen(), so closed_at and the close/reopen
        audit trail always match the status.
        """
        self.policy.require_route(actor.role, TRANSITION_ROLES)
        new_status = parse_enum(TicketStatus, status, "status")
        active = [s.value for s in ACTIVE_STATUSES]
        if new_status in TERMINAL_STATUSES:
            raise ValidationError(
                f"Use the close endpoint to move a ticket to {new_status.value}",
                details={"field": "status", "allowed": active}
            )

        current = self.ticket_repo.get_ticket_or_raise(ticket_id)
        if TicketStatus(current.status) in TERMINAL_STATUSES:
            raise ValidationError(
                f"Ticket is {current.status}; use the reopen endpoint first",
                details={"ticket_id": ticket_id, "status": current.status}
            )

        ticket = self.ticket_repo.update_ticket(ticket_id, {"status": new_status.value})

        self.audit.record(
            AuditAction.TICKET_STATUS_UPDATED,
            actor.user_id,
            {"ticket_id": ticket_id, "from": current.status, "to": new_status.value}
        )
        return ticket

    def close(
        self,
        actor: ActorContext,
        ticket_id: str,
        status: Any = TicketStatus.CLOSED
    ) -> Ticket:
        """
        Move a ticket to a terminal status and stamp closed_at

        IT_PERSON may only close tickets assigned to them; to anyone else
        such a ticket looks absent. ADMIN and SUPER_ADMIN may close any ticket.
        """
        terminal = parse_enum(TicketStatus, status, "status")
        if terminal not in TERMINAL_STATUSES:
            raise ValidationError(
                f"Cannot close a ticket with status {terminal.value}",
                details={"field": "status", "allowed": [s.value for s in TERMINAL_STATUSES]}
            )

        role = Role(actor.role)
        if role == Role.IT_PERSON:
            self._get_assigned_or_raise(actor, ticket_id)
        elif role in CLOSE_ANY_ROLES:
            self.ticket_repo.get_ticket_or_raise(ticket_id)
        else:
            raise ForbiddenError("Insufficient role to close tickets", details={"role": role.value})

        ticket = self.ticket_repo.update_ticket(
            ticket_id,
            {"status": terminal.value, "closed_at": utc_now()}
        )

        self.audit.record(
            AuditAction.TICKET_CLOSED,
            actor.user_id,
            {"ticket_id": ticket_id, "status": terminal.value}
        )
        return ticket

    def reopen(self, actor: ActorContext, ticket_id: str) -> Ticket:
        """Clear closed_at and move back to OPEN"""
        self.policy.require_route(actor.role, TRANSITION_ROLES)
        self.ticket_repo.get_ticket_or_raise(ticket_id)

        ticket = self.ticket_repo.update_ticket(
            ticket_id,
            {"status": TicketStatus.OPEN.value, "closed_at": None}
        )

        self.audit.record(AuditAction.TICKET_REOPENED, actor.user_id, {"ticket_id": ticket_id})
        return ticket

    # =========================================================================
    # Notes
    # =========================================================================

    def add_note(self, actor: ActorContext, ticket_id: str, note: str) -> TicketNote:
        """Append a note. IT_PERSON is limited to tickets assigned to them."""
        if not note or not note.strip():
            raise ValidationError("Note text is required", details={"field": "note"})

        role = Role(actor.role)
        if role == Role.IT_PERSON:
            self._get_assigned_or_raise(actor, ticket_id)
        elif role in (Role.ADMIN, Role.SUPER_ADMIN):
            self.ticket_repo.get_ticket_or_raise(ticket_id)
        else:
            raise ForbiddenError("Insufficient role to add notes", details={"role": role.value})

        entry = TicketNote(
            note_id=generate_note_id(),
            ticket_id=ticket_id,
            note=note.strip(),
            added_by_id=actor.user_id,
            created_at=utc_now()
        )
        self.ticket_repo.add_note(entry)

        self.audit.record(
            AuditAction.TICKET_NOTE_ADDED,
            actor.user_id,
            {"ticket_id": ticket_id, "note_id": entry.note_id}
        )
        return entry

    # =========================================================================
    # Deletion
    # =========================================================================

    def delete(self, actor: ActorContext, ticket_id: str) -> None:
        """Hard delete a ticket together with its notes"""
        self.policy.require_route(actor.role, DELETE_ROLES)
        notes_deleted = self.ticket_repo.delete_ticket(ticket_id)

        self.audit.record(
            AuditAction.TICKET_DELETED,
            actor.user_id,
            {"ticket_id": ticket_id, "notes_deleted": notes_deleted}
        )

    # =========================================================================
    # Reads
    # =========================================================================

    def get_ticket(self, actor: ActorContext, ticket_id: str) -> Ticket:
        """Staff see any ticket; everyone else only their own"""
        ticket = self.ticket_repo.get_ticket_or_raise(ticket_id)
        if Role(actor.role) not in STAFF_ROLES and ticket.user_id != actor.user_id:
            raise TicketNotFoundError("Ticket not found", details={"ticket_id": ticket_id})
        return ticket

    def get_notes(self, actor: ActorContext, ticket_id: str) -> List[TicketNote]:
        self.get_ticket(actor, ticket_id)
        return self.ticket_repo.get_notes(ticket_id)

    def list_tickets(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        user_id: Optional[str] = None,
        assigned_to: Optional[str] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None
    ) -> List[Ticket]:
        """Filtered ticket listing, newest first. Filter values are validated."""
        if created_from and created_to and created_from > created_to:
            raise ValidationError("'from' must not be after 'to'")

        return self.ticket_repo.list_tickets(
            user_id=user_id,
            assigned_to=assigned_to,
            status=parse_enum(TicketStatus, status, "status").value if status else None,
            priority=parse_enum(TicketPriority, priority, "priority").value if priority else None,
            category=parse_enum(TicketCategory, category, "category").value if category else None,
            created_from=created_from,
            created_to=created_to
        )

    def list_assigned(self, actor: ActorContext) -> List[Ticket]:
        """Tickets assigned to the actor"""
        return self.ticket_repo.list_tickets(assigned_to=actor.user_id)

    def list_with_notes(self, user_id: str) -> List[Dict[str, Any]]:
        """A user's own tickets, each with its notes"""
        result = []
        for ticket in self.ticket_repo.list_tickets(user_id=user_id):
            item = ticket.model_dump(mode="json")
            item["notes"] = [
                n.model_dump(mode="json") for n in self.ticket_repo.get_notes(ticket.ticket_id)
            ]
            result.append(item)
        return result

    def _get_assigned_or_raise(self, actor: ActorContext, ticket_id: str) -> Ticket:
        ticket = self.ticket_repo.get_ticket(ticket_id)
        if not ticket or ticket.assigned_to != actor.user_id:
            raise TicketNotFoundError(
                "Ticket not found or not assigned to you",
                details={"ticket_id": ticket_id}
            )
        return ticket
