"""Service modules - Business logic layer"""
from .credential_service import CredentialService
from .user_service import UserService
from .dashboard_service import DashboardService
from .report_service import ReportService
from .retention_service import RetentionSweep
from .container import ServiceContainer

__all__ = [
    "CredentialService",
    "UserService",
    "DashboardService",
    "ReportService",
    "RetentionSweep",
    "ServiceContainer",
]
