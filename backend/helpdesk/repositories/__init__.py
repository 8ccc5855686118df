"""Repository modules - Data access layer"""
from .mongo_client import create_client, get_database, create_indexes, health_check
from .user_repo import UserRepository
from .ticket_repo import TicketRepository
from .audit_repo import AuditRepository
from .login_history_repo import LoginHistoryRepository
from .stats_repo import DashboardStatsRepository
from .archive_repo import ArchiveRepository

__all__ = [
    "create_client",
    "get_database",
    "create_indexes",
    "health_check",
    "UserRepository",
    "TicketRepository",
    "AuditRepository",
    "LoginHistoryRepository",
    "DashboardStatsRepository",
    "ArchiveRepository",
]
