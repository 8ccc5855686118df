"""Ticket Repository - Data access for tickets and their notes"""
from typing import Any, Dict, List, Optional
from datetime import datetime
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database

from ..domain.models import Ticket, TicketNote
from ..domain.errors import TicketNotFoundError
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)


class TicketRepository:
    """Repository for ticket operations"""

    def __init__(self, db: Database):
        self._tickets: Collection = db["tickets"]
        self._notes: Collection = db["ticket_notes"]

    @staticmethod
    def _to_ticket(doc: Optional[Dict[str, Any]]) -> Optional[Ticket]:
        if not doc:
            return None
        doc.pop("_id", None)
        return Ticket.model_validate(doc)

    # =========================================================================
    # Ticket CRUD
    # =========================================================================

    def create_ticket(self, ticket: Ticket) -> Ticket:
        """Create a new ticket"""
        doc = ticket.model_dump()
        doc["_id"] = ticket.ticket_id

        self._tickets.insert_one(doc)
        logger.info(f"Created ticket: {ticket.ticket_id}", extra={"ticket_id": ticket.ticket_id})
        return ticket

    def get_ticket(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by ID"""
        return self._to_ticket(self._tickets.find_one({"ticket_id": ticket_id}))

    def get_ticket_or_raise(self, ticket_id: str) -> Ticket:
        """Get ticket by ID or raise error"""
        ticket = self.get_ticket(ticket_id)
        if not ticket:
            raise TicketNotFoundError("Ticket not found", details={"ticket_id": ticket_id})
        return ticket

    def update_ticket(self, ticket_id: str, updates: Dict[str, Any]) -> Ticket:
        """Apply a partial update and return the new state"""
        updates["updated_at"] = utc_now()

        result = self._tickets.find_one_and_update(
            {"ticket_id": ticket_id},
            {"$set": updates},
            return_document=True
        )
        if result is None:
            raise TicketNotFoundError("Ticket not found", details={"ticket_id": ticket_id})

        logger.info(f"Updated ticket: {ticket_id}", extra={"ticket_id": ticket_id})
        return self._to_ticket(result)

    def delete_ticket(self, ticket_id: str) -> int:
        """
        Hard delete a ticket and cascade its notes

        Returns:
            Number of notes removed with the ticket
        """
        notes_deleted = self.delete_notes(ticket_id)
        result = self._tickets.delete_one({"ticket_id": ticket_id})
        if result.deleted_count == 0:
            raise TicketNotFoundError("Ticket not found", details={"ticket_id": ticket_id})

        logger.info(
            f"Deleted ticket: {ticket_id} ({notes_deleted} notes)",
            extra={"ticket_id": ticket_id}
        )
        return notes_deleted

    def list_tickets(
        self,
        user_id: Optional[str] = None,
        assigned_to: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        created_before: Optional[datetime] = None,
        newest_first: bool = True,
        limit: int = 0
    ) -> List[Ticket]:
        """
        List tickets with filters

        created_from/created_to are inclusive bounds; created_before is exclusive.
        """
        query: Dict[str, Any] = {}
        if user_id is not None:
            query["user_id"] = user_id
        if assigned_to is not None:
            query["assigned_to"] = assigned_to
        if status is not None:
            query["status"] = status
        if priority is not None:
            query["priority"] = priority
        if category is not None:
            query["category"] = category

        created: Dict[str, Any] = {}
        if created_from is not None:
            created["$gte"] = created_from
        if created_to is not None:
            created["$lte"] = created_to
        if created_before is not None:
            created["$lt"] = created_before
        if created:
            query["created_at"] = created

        cursor = self._tickets.find(query).sort(
            "created_at", DESCENDING if newest_first else ASCENDING
        )
        if limit:
            cursor = cursor.limit(limit)

        return [self._to_ticket(doc) for doc in cursor]

    def count_by_status(self) -> Dict[str, int]:
        """Ticket totals per status value"""
        counts: Dict[str, int] = {}
        for doc in self._tickets.find({}, {"status": 1}):
            status = doc.get("status")
            counts[status] = counts.get(status, 0) + 1
        return counts

    # =========================================================================
    # Notes (append-only)
    # =========================================================================

    def add_note(self, note: TicketNote) -> TicketNote:
        """Append a note to a ticket"""
        doc = note.model_dump()
        doc["_id"] = note.note_id
        self._notes.insert_one(doc)
        logger.info(
            f"Added note {note.note_id} to ticket {note.ticket_id}",
            extra={"ticket_id": note.ticket_id, "user_id": note.added_by_id}
        )
        return note

    def get_notes(self, ticket_id: str) -> List[TicketNote]:
        """All notes for a ticket, oldest first"""
        cursor = self._notes.find({"ticket_id": ticket_id}).sort("created_at", ASCENDING)
        notes = []
        for doc in cursor:
            doc.pop("_id", None)
            notes.append(TicketNote.model_validate(doc))
        return notes

    def delete_notes(self, ticket_id: str) -> int:
        """Remove all notes of a ticket (cascade only; notes are never deleted individually)"""
        return self._notes.delete_many({"ticket_id": ticket_id}).deleted_count
