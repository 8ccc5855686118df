"""Core engine - Authorization policy, ticket state machine and audit trail"""
from .authorization import AuthorizationPolicy, CREATION_HIERARCHY, ROLE_RANK
from .ticket_lifecycle import TicketLifecycleEngine
from .audit_writer import AuditWriter

__all__ = [
    "AuthorizationPolicy",
    "CREATION_HIERARCHY",
    "ROLE_RANK",
    "TicketLifecycleEngine",
    "AuditWriter",
]
