"""
API Schemas

Request models for the helpdesk endpoints and small response helpers.
Request fields accept both snake_case and camelCase names.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from ...domain.enums import Role, BusinessType, TicketCategory, TicketPriority, TicketStatus
from ...domain.models import Ticket, TicketNote, User


class RequestModel(BaseModel):
    """Base for request bodies"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# =============================================================================
# Auth Schemas
# =============================================================================

class RegisterRequest(RequestModel):
    """Public self-registration"""
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: Optional[Role] = Field(None, description="Only USER is accepted")
    location: Optional[str] = Field(None, max_length=200)


class LoginRequest(RequestModel):
    """Email and password login"""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


# =============================================================================
# User Schemas
# =============================================================================

class CreateUserRequest(RequestModel):
    """Create an account below the caller in the hierarchy"""
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: Optional[Role] = None
    location: Optional[str] = Field(None, max_length=200)
    business_type: Optional[BusinessType] = None


class CreateSuperAdminRequest(RequestModel):
    """System owner creates a super admin"""
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    location: Optional[str] = Field(None, max_length=200)
    business_type: BusinessType


class UpdateUserRequest(RequestModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)


class ChangeRoleRequest(RequestModel):
    role: Role


class BusinessTypeRequest(RequestModel):
    business_type: BusinessType


class ExpiryRequest(RequestModel):
    expiry_date: datetime


# =============================================================================
# Ticket Schemas
# =============================================================================

class CreateTicketRequest(RequestModel):
    """Request to create a new ticket"""
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=5000)
    category: TicketCategory
    priority: Optional[TicketPriority] = None
    ip_address: Optional[str] = Field(None, max_length=100)
    device_name: Optional[str] = Field(None, max_length=200)
    user_id: Optional[str] = Field(None, description="Target user when raised by an IT person")


class RaiseTicketRequest(CreateTicketRequest):
    """IT person raises a ticket for a user"""
    user_id: str


class UpdateStatusRequest(RequestModel):
    status: str = Field(..., min_length=1)


class AssignRequest(RequestModel):
    assigned_to: str = Field(..., min_length=1)


class CloseTicketRequest(RequestModel):
    status: TicketStatus = TicketStatus.CLOSED


class AddNoteRequest(RequestModel):
    note: str = Field(..., min_length=1, max_length=5000)


# =============================================================================
# Response helpers
# =============================================================================

def user_out(user: User) -> Dict[str, Any]:
    return user.public_dict()


def users_out(users: List[User]) -> List[Dict[str, Any]]:
    return [u.public_dict() for u in users]


def ticket_out(ticket: Ticket) -> Dict[str, Any]:
    return ticket.model_dump(mode="json")


def tickets_out(tickets: List[Ticket]) -> List[Dict[str, Any]]:
    return [t.model_dump(mode="json") for t in tickets]


def note_out(note: TicketNote) -> Dict[str, Any]:
    return note.model_dump(mode="json")
