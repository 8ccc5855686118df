"""Report Service - System owner reports"""
from typing import Any, Dict

from ..domain.enums import Role, BusinessType, BUSINESS_TICKET_LIMITS
from ..repositories.user_repo import UserRepository
from ..repositories.ticket_repo import TicketRepository
from ..repositories.audit_repo import AuditRepository
from ..repositories.login_history_repo import LoginHistoryRepository
from ..utils.time import format_iso

RECENT_LIMIT = 10


class ReportService:
    """Read-only cross-collection reports for the system owner"""

    def __init__(
        self,
        user_repo: UserRepository,
        ticket_repo: TicketRepository,
        audit_repo: AuditRepository,
        login_repo: LoginHistoryRepository
    ):
        self.user_repo = user_repo
        self.ticket_repo = ticket_repo
        self.audit_repo = audit_repo
        self.login_repo = login_repo

    def system_report(self) -> Dict[str, Any]:
        super_admins = self.user_repo.list_users(roles=[Role.SUPER_ADMIN])

        by_business_type: Dict[str, int] = {}
        for user in super_admins:
            key = user.business_type or "UNSET"
            by_business_type[key] = by_business_type.get(key, 0) + 1

        recent_audit = []
        for entry in self.audit_repo.get_entries(limit=RECENT_LIMIT):
            item = entry.model_dump(mode="json")
            item["user"] = self._user_summary(entry.user_id)
            recent_audit.append(item)

        recent_logins = []
        for row in self.login_repo.list_recent(limit=RECENT_LIMIT):
            item = row.model_dump(mode="json")
            item["user"] = self._user_summary(row.user_id)
            recent_logins.append(item)

        accounts = []
        for user in super_admins:
            account = self.user_repo.get_account(user.user_id)
            accounts.append({
                "user_id": user.user_id,
                "username": user.username,
                "business_type": user.business_type,
                "ticket_limit": BUSINESS_TICKET_LIMITS.get(BusinessType(user.business_type)) if user.business_type else None,
                "location": user.location,
                "expiry_date": format_iso(account.expiry_date) if account else None,
            })

        return {
            "super_admins_by_business_type": by_business_type,
            "tickets_by_status": self.ticket_repo.count_by_status(),
            "recent_audit_logs": recent_audit,
            "recent_login_history": recent_logins,
            "super_admin_accounts": accounts,
        }

    def _user_summary(self, user_id: str) -> Dict[str, Any]:
        user = self.user_repo.get_user(user_id)
        if not user:
            return {"username": None, "role": None}
        return {"username": user.username, "role": user.role}
