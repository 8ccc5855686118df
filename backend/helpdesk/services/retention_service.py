"""Retention Service - Move aged rows into cold storage"""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config.settings import Settings
from ..domain.models import ArchivedData, SweepResult
from ..domain.enums import ArchivedTable
from ..repositories.ticket_repo import TicketRepository
from ..repositories.audit_repo import AuditRepository
from ..repositories.login_history_repo import LoginHistoryRepository
from ..repositories.archive_repo import ArchiveRepository
from ..utils.idgen import generate_archive_id
from ..utils.time import utc_now, months_ago
from ..utils.logger import get_logger

logger = get_logger(__name__)


class RetentionSweep:
    """
    Archive-then-delete batch job

    Each table is an independent pass. A failure inside one pass stops
    that table only; rows already moved stay moved and the other tables
    still run. Rerunning after a partial failure can archive a row a
    second time if it was copied but not deleted. Sweeps must not run
    concurrently with each other.
    """

    def __init__(
        self,
        settings: Settings,
        ticket_repo: TicketRepository,
        audit_repo: AuditRepository,
        login_repo: LoginHistoryRepository,
        archive_repo: ArchiveRepository
    ):
        self.settings = settings
        self.ticket_repo = ticket_repo
        self.audit_repo = audit_repo
        self.login_repo = login_repo
        self.archive_repo = archive_repo

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        """Rows created strictly before this instant are archived"""
        return months_ago(self.settings.retention_months, now)

    def run(self, now: Optional[datetime] = None) -> SweepResult:
        """Run one sweep over every retained table"""
        cutoff = self.cutoff(now)
        result = SweepResult(cutoff=cutoff)
        logger.info(f"Retention sweep started, cutoff {cutoff.isoformat()}")

        passes: List[Tuple[ArchivedTable, Callable[[datetime], int]]] = [
            (ArchivedTable.TICKET, self._archive_tickets),
            (ArchivedTable.AUDIT_LOG, self._archive_audit_logs),
            (ArchivedTable.LOGIN_HISTORY, self._archive_login_history),
        ]
        for table, archive_pass in passes:
            try:
                result.archived[table.value] = archive_pass(cutoff)
            except Exception as e:
                logger.exception(
                    f"Retention pass failed for {table.value}",
                    extra={"table": table.value}
                )
                result.failed[table.value] = str(e)

        logger.info(
            f"Retention sweep finished: archived={result.archived} failed={list(result.failed)}"
        )
        return result

    # =========================================================================
    # Per-table passes
    # =========================================================================

    def _envelope(self, table: ArchivedTable, row: Dict[str, Any]) -> ArchivedData:
        row.pop("_id", None)
        return self.archive_repo.archive(ArchivedData(
            archive_id=generate_archive_id(),
            table_name=table.value,
            data=row,
            archived_at=utc_now()
        ))

    def _archive_tickets(self, cutoff: datetime) -> int:
        count = 0
        for ticket in self.ticket_repo.list_tickets(created_before=cutoff, newest_first=False):
            row = ticket.model_dump()
            # Notes leave with their ticket
            row["notes"] = [n.model_dump() for n in self.ticket_repo.get_notes(ticket.ticket_id)]
            self._envelope(ArchivedTable.TICKET, row)
            self.ticket_repo.delete_ticket(ticket.ticket_id)
            count += 1

        if count:
            logger.info(f"Archived {count} tickets", extra={"table": ArchivedTable.TICKET.value})
        return count

    def _archive_audit_logs(self, cutoff: datetime) -> int:
        count = 0
        for row in self.audit_repo.find_older_than(cutoff):
            self._envelope(ArchivedTable.AUDIT_LOG, row)
            self.audit_repo.delete_entry(row["audit_id"])
            count += 1

        if count:
            logger.info(f"Archived {count} audit logs", extra={"table": ArchivedTable.AUDIT_LOG.value})
        return count

    def _archive_login_history(self, cutoff: datetime) -> int:
        count = 0
        for row in self.login_repo.find_older_than(cutoff):
            self._envelope(ArchivedTable.LOGIN_HISTORY, row)
            self.login_repo.delete_row(row["login_id"])
            count += 1

        if count:
            logger.info(
                f"Archived {count} login rows",
                extra={"table": ArchivedTable.LOGIN_HISTORY.value}
            )
        return count
