"""Domain Enumerations - Roles, ticket states and audit actions"""
from enum import Enum


class Role(str, Enum):
    """Account role, highest privilege first"""
    SYSTEM_OWNER = "SYSTEM_OWNER"
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    IT_PERSON = "IT_PERSON"
    USER = "USER"
    EXPIRED = "EXPIRED"  # Super admin whose account passed its expiry date


class BusinessType(str, Enum):
    """Super admin business size (advisory ticket volume cap)"""
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"


# Advisory only, not enforced
BUSINESS_TICKET_LIMITS = {
    BusinessType.SMALL: 300,
    BusinessType.MEDIUM: 700,
    BusinessType.LARGE: 3000,
}


class TicketStatus(str, Enum):
    """Ticket lifecycle status"""
    PENDING = "PENDING"
    OPEN = "OPEN"
    SOLVED = "SOLVED"
    CLOSED = "CLOSED"


TERMINAL_STATUSES = (TicketStatus.SOLVED, TicketStatus.CLOSED)
ACTIVE_STATUSES = (TicketStatus.PENDING, TicketStatus.OPEN)


class TicketPriority(str, Enum):
    """Ticket priority"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class TicketCategory(str, Enum):
    """Ticket category"""
    HARDWARE = "HARDWARE"
    SOFTWARE = "SOFTWARE"
    NETWORK = "NETWORK"
    ACCESS = "ACCESS"
    OTHER = "OTHER"


class AuditAction(str, Enum):
    """Privileged actions recorded in the audit log"""
    # Identity
    USER_REGISTERED = "USER_REGISTERED"
    USER_LOGGED_IN = "USER_LOGGED_IN"
    ACCOUNT_EXPIRED = "ACCOUNT_EXPIRED"

    # Account management
    USER_CREATED = "USER_CREATED"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"
    USER_ROLE_CHANGED = "USER_ROLE_CHANGED"
    USER_BUSINESS_TYPE_CHANGED = "USER_BUSINESS_TYPE_CHANGED"
    ADMIN_CREATED = "ADMIN_CREATED"
    ADMIN_DELETED = "ADMIN_DELETED"
    SUPER_ADMIN_CREATED = "SUPER_ADMIN_CREATED"
    SUPER_ADMIN_DELETED = "SUPER_ADMIN_DELETED"
    SUPER_ADMIN_EXPIRY_UPDATED = "SUPER_ADMIN_EXPIRY_UPDATED"

    # Tickets
    TICKET_CREATED = "TICKET_CREATED"
    TICKET_ASSIGNED = "TICKET_ASSIGNED"
    TICKET_STATUS_UPDATED = "TICKET_STATUS_UPDATED"
    TICKET_CLOSED = "TICKET_CLOSED"
    TICKET_REOPENED = "TICKET_REOPENED"
    TICKET_NOTE_ADDED = "TICKET_NOTE_ADDED"
    TICKET_DELETED = "TICKET_DELETED"


class ArchivedTable(str, Enum):
    """Source tables the retention sweep moves to cold storage"""
    TICKET = "Ticket"
    AUDIT_LOG = "AuditLog"
    LOGIN_HISTORY = "LoginHistory"
