"""Domain Models - Pydantic schemas for all persisted entities"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict

from .enums import (
    Role, BusinessType, TicketStatus, TicketPriority, TicketCategory, AuditAction
)


# ============================================================================
# Identity
# ============================================================================

class User(BaseModel):
    """Stored user identity"""
    model_config = ConfigDict(extra="ignore", use_enum_values=True, validate_default=True)

    user_id: str = Field(..., description="Stable user identifier")
    username: str = Field(..., description="Globally unique login name")
    email: str = Field(..., description="Globally unique email")
    password_hash: str = Field(..., description="Salted bcrypt hash, never the plaintext")
    role: Role = Field(Role.USER, description="Current (live) role")
    location: Optional[str] = None
    business_type: Optional[BusinessType] = Field(None, description="Advisory ticket volume class")
    created_at: datetime
    updated_at: datetime

    def public_dict(self) -> Dict[str, Any]:
        """JSON-safe view without the password hash"""
        return self.model_dump(mode="json", exclude={"password_hash"})


class Account(BaseModel):
    """Expiry record held 1:1 by every SUPER_ADMIN user"""
    model_config = ConfigDict(extra="ignore")

    account_id: str
    user_id: str
    expiry_date: datetime
    created_at: datetime
    updated_at: datetime


class ActorContext(BaseModel):
    """Current actor, resolved from a verified session token and the live store"""
    model_config = ConfigDict(extra="forbid")

    user_id: str
    username: str
    role: Role


class LoginHistory(BaseModel):
    """One row per successful login"""
    model_config = ConfigDict(extra="ignore")

    login_id: str
    user_id: str
    ip_address: Optional[str] = None
    device_info: Optional[str] = None
    created_at: datetime


# ============================================================================
# Tickets
# ============================================================================

class Ticket(BaseModel):
    """Support ticket"""
    model_config = ConfigDict(extra="ignore", use_enum_values=True, validate_default=True)

    ticket_id: str
    title: str
    description: str = ""
    category: TicketCategory
    priority: TicketPriority = TicketPriority.MEDIUM
    status: TicketStatus = TicketStatus.PENDING
    user_id: str = Field(..., description="Owning user")
    assigned_to: Optional[str] = Field(None, description="Assignee user id")
    ip_address: Optional[str] = None
    device_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    closed_at: Optional[datetime] = None


class TicketNote(BaseModel):
    """Append-only annotation on a ticket"""
    model_config = ConfigDict(extra="ignore")

    note_id: str
    ticket_id: str
    note: str
    added_by_id: str
    created_at: datetime


# ============================================================================
# Audit & Reporting
# ============================================================================

class AuditLog(BaseModel):
    """Append-only record of a privileged action"""
    model_config = ConfigDict(extra="ignore", use_enum_values=True, validate_default=True)

    audit_id: str
    action: AuditAction
    details: Optional[str] = None
    user_id: str = Field(..., description="Actor who performed the action")
    created_at: datetime


class DashboardStats(BaseModel):
    """Aggregate counts computed on demand"""
    total_tickets: int
    open_tickets: int
    closed_tickets: int
    total_users: int
    tickets_by_priority: Dict[str, int]
    tickets_by_category: Dict[str, int]
    tickets_by_status: Dict[str, int]
    recent_tickets: List[Dict[str, Any]]
    recent_users: List[Dict[str, Any]]


class DashboardSnapshot(BaseModel):
    """Point-in-time materialization of dashboard counts for one caller"""
    model_config = ConfigDict(extra="ignore")

    stats_id: str
    user_id: str
    date: datetime
    total_tickets: int
    open_tickets: int
    closed_tickets: int
    total_users: int


class ArchivedData(BaseModel):
    """Cold-storage envelope for an aged-out row"""
    model_config = ConfigDict(extra="ignore")

    archive_id: str
    table_name: str
    data: Dict[str, Any]
    archived_at: datetime


class SweepResult(BaseModel):
    """Outcome of one retention sweep"""
    cutoff: datetime
    archived: Dict[str, int] = Field(default_factory=dict)
    failed: Dict[str, str] = Field(default_factory=dict)
