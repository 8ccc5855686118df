"""Dashboard Service - On-demand aggregate counts and historical snapshots"""
from datetime import datetime
from typing import List, Optional

from ..domain.models import ActorContext, DashboardStats, DashboardSnapshot
from ..domain.enums import (
    TicketStatus, TicketPriority, TicketCategory, ACTIVE_STATUSES, TERMINAL_STATUSES
)
from ..domain.errors import ValidationError
from ..repositories.ticket_repo import TicketRepository
from ..repositories.user_repo import UserRepository
from ..repositories.stats_repo import DashboardStatsRepository
from ..engine.authorization import AuthorizationPolicy
from ..utils.idgen import generate_stats_id
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)

RECENT_LIMIT = 5


class DashboardService:
    """
    Scan tickets and users to build dashboard counts

    Nothing is maintained incrementally. Every call recomputes from the
    live collections and persists one snapshot row for the caller, so two
    identical calls leave two rows.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        user_repo: UserRepository,
        stats_repo: DashboardStatsRepository,
        policy: Optional[AuthorizationPolicy] = None
    ):
        self.ticket_repo = ticket_repo
        self.user_repo = user_repo
        self.stats_repo = stats_repo
        self.policy = policy or AuthorizationPolicy()

    def compute_dashboard(
        self,
        actor: ActorContext,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> DashboardStats:
        """
        Build dashboard counts for the actor

        Tickets are optionally limited to creation time in [date_from, date_to].
        Users are limited by the actor's role-visibility ceiling.
        """
        if date_from and date_to and date_from > date_to:
            raise ValidationError("'from' must not be after 'to'")

        tickets = self.ticket_repo.list_tickets(created_from=date_from, created_to=date_to)
        users = self.user_repo.list_users(
            roles=sorted(self.policy.visible_roles(actor.role), key=lambda r: r.value),
            newest_first=True
        )

        by_status = {s.value: 0 for s in TicketStatus}
        by_priority = {p.value: 0 for p in TicketPriority}
        by_category = {c.value: 0 for c in TicketCategory}
        for ticket in tickets:
            by_status[ticket.status] = by_status.get(ticket.status, 0) + 1
            by_priority[ticket.priority] = by_priority.get(ticket.priority, 0) + 1
            by_category[ticket.category] = by_category.get(ticket.category, 0) + 1

        stats = DashboardStats(
            total_tickets=len(tickets),
            open_tickets=sum(by_status[s.value] for s in ACTIVE_STATUSES),
            closed_tickets=sum(by_status[s.value] for s in TERMINAL_STATUSES),
            total_users=len(users),
            tickets_by_priority=by_priority,
            tickets_by_category=by_category,
            tickets_by_status=by_status,
            # Both lists come back newest first from the store
            recent_tickets=[t.model_dump(mode="json") for t in tickets[:RECENT_LIMIT]],
            recent_users=[u.public_dict() for u in users[:RECENT_LIMIT]]
        )

        self.stats_repo.save_snapshot(DashboardSnapshot(
            stats_id=generate_stats_id(),
            user_id=actor.user_id,
            date=utc_now(),
            total_tickets=stats.total_tickets,
            open_tickets=stats.open_tickets,
            closed_tickets=stats.closed_tickets,
            total_users=stats.total_users
        ))
        logger.debug("Dashboard snapshot saved", extra={"user_id": actor.user_id})
        return stats

    def historical(
        self,
        actor: ActorContext,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> List[DashboardSnapshot]:
        """The actor's own snapshots in [date_from, date_to], oldest first"""
        if date_from and date_to and date_from > date_to:
            raise ValidationError("'from' must not be after 'to'")
        return self.stats_repo.list_snapshots(actor.user_id, date_from, date_to)
