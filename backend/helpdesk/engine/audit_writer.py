"""Audit Writer - Best-effort append-only audit entries"""
from typing import Any, Dict, Optional, Union

from ..domain.models import AuditLog
from ..domain.enums import AuditAction
from ..repositories.audit_repo import AuditRepository
from ..utils.idgen import generate_audit_id
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)


class AuditWriter:
    """
    Write audit entries (append-only)

    Every privileged mutation follows a two-step protocol:
    1. the primary write, which may raise;
    2. a best-effort audit write through this class.

    Step 2 never raises. If it fails the primary write stays committed
    and the failure is only logged, so the audit trail can be missing an
    entry for an action that did happen.
    """

    def __init__(self, repo: AuditRepository):
        self.repo = repo

    def record(
        self,
        action: Union[AuditAction, str],
        user_id: str,
        details: Optional[Union[str, Dict[str, Any]]] = None
    ) -> Optional[AuditLog]:
        """
        Write a single audit entry

        Args:
            action: Audited action
            user_id: Actor who performed it
            details: Free text or a small dict rendered as key=value pairs

        Returns:
            The stored entry, or None if the write failed
        """
        action_value = AuditAction(action).value
        try:
            entry = AuditLog(
                audit_id=generate_audit_id(),
                action=action_value,
                details=self._render(details),
                user_id=user_id,
                created_at=utc_now()
            )
            return self.repo.create_entry(entry)
        except Exception:
            logger.exception(
                f"Audit write failed for {action_value}",
                extra={"user_id": user_id, "action": action_value}
            )
            return None

    @staticmethod
    def _render(details: Optional[Union[str, Dict[str, Any]]]) -> Optional[str]:
        if details is None or isinstance(details, str):
            return details
        return ", ".join(f"{key}={value}" for key, value in details.items())
