"""Service Container - Wires repositories and services from explicit handles"""
from pymongo.database import Database

from ..config.settings import Settings
from ..repositories.user_repo import UserRepository
from ..repositories.ticket_repo import TicketRepository
from ..repositories.audit_repo import AuditRepository
from ..repositories.login_history_repo import LoginHistoryRepository
from ..repositories.stats_repo import DashboardStatsRepository
from ..repositories.archive_repo import ArchiveRepository
from ..engine.authorization import AuthorizationPolicy
from ..engine.audit_writer import AuditWriter
from ..engine.ticket_lifecycle import TicketLifecycleEngine
from ..utils.jwt import TokenCodec
from ..utils.passwords import PasswordHasher
from .credential_service import CredentialService
from .user_service import UserService
from .dashboard_service import DashboardService
from .report_service import ReportService
from .retention_service import RetentionSweep


class ServiceContainer:
    """
    One object graph per application instance

    Tests build a container around an in-memory database; the server
    builds one around the real MongoDB handle.
    """

    def __init__(self, settings: Settings, db: Database):
        self.settings = settings
        self.db = db

        # Repositories
        self.user_repo = UserRepository(db)
        self.ticket_repo = TicketRepository(db)
        self.audit_repo = AuditRepository(db)
        self.login_repo = LoginHistoryRepository(db)
        self.stats_repo = DashboardStatsRepository(db)
        self.archive_repo = ArchiveRepository(db)

        # Engine
        self.policy = AuthorizationPolicy()
        self.audit_writer = AuditWriter(self.audit_repo)
        self.tickets = TicketLifecycleEngine(
            self.ticket_repo, self.user_repo, self.audit_writer, self.policy
        )

        # Services
        self.credentials = CredentialService(
            self.user_repo,
            self.login_repo,
            self.audit_writer,
            TokenCodec(settings),
            PasswordHasher(settings)
        )
        self.users = UserService(
            settings,
            self.user_repo,
            self.audit_repo,
            self.login_repo,
            self.credentials,
            self.audit_writer,
            self.policy
        )
        self.dashboard = DashboardService(
            self.ticket_repo, self.user_repo, self.stats_repo, self.policy
        )
        self.reports = ReportService(
            self.user_repo, self.ticket_repo, self.audit_repo, self.login_repo
        )
        self.retention = RetentionSweep(
            settings, self.ticket_repo, self.audit_repo, self.login_repo, self.archive_repo
        )
