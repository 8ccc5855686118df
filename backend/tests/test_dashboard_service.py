from datetime import timedelta

import pytest

from helpdesk.domain.enums import Role, TicketPriority, TicketStatus
from helpdesk.domain.errors import ValidationError
from helpdesk.utils.time import utc_now


@pytest.fixture
def populated(services, make_user, actor_for):
    """Users of every role and a few tickets in different states"""
    alice = actor_for(make_user(Role.USER, "alice"))
    make_user(Role.USER, "carol")
    make_user(Role.IT_PERSON, "bob")
    admin = actor_for(make_user(Role.ADMIN, "admin"))
    boss = actor_for(make_user(Role.SUPER_ADMIN, "boss"))
    make_user(Role.SYSTEM_OWNER, "owner")

    tickets = services.tickets
    t1 = tickets.create_ticket(alice, "Printer down", "HARDWARE", priority="HIGH")
    t2 = tickets.create_ticket(alice, "Mail", "SOFTWARE")
    tickets.create_ticket(alice, "VPN", "NETWORK", priority="URGENT")
    tickets.update_status(admin, t1.ticket_id, "OPEN")
    tickets.close(admin, t2.ticket_id, "SOLVED")
    return {"alice": alice, "admin": admin, "boss": boss}


class TestComputeDashboard:
    def test_counts(self, services, populated):
        stats = services.dashboard.compute_dashboard(populated["admin"])

        assert stats.total_tickets == 3
        assert stats.open_tickets == 2
        assert stats.closed_tickets == 1
        assert stats.tickets_by_status[TicketStatus.OPEN.value] == 1
        assert stats.tickets_by_status[TicketStatus.CLOSED.value] == 0
        assert stats.tickets_by_priority[TicketPriority.URGENT.value] == 1

    def test_breakdowns_add_up(self, services, populated):
        stats = services.dashboard.compute_dashboard(populated["admin"])

        assert set(stats.tickets_by_priority) == {p.value for p in TicketPriority}
        assert sum(stats.tickets_by_priority.values()) == stats.total_tickets
        assert sum(stats.tickets_by_category.values()) == stats.total_tickets
        assert sum(stats.tickets_by_status.values()) == stats.total_tickets
        assert stats.open_tickets + stats.closed_tickets <= stats.total_tickets

    def test_user_visibility_ceiling(self, services, populated):
        # ADMIN sees IT_PERSON and USER
        assert services.dashboard.compute_dashboard(populated["admin"]).total_users == 3
        # SUPER_ADMIN additionally sees ADMIN, never peers or the owner
        boss_stats = services.dashboard.compute_dashboard(populated["boss"])
        assert boss_stats.total_users == 4
        assert {u["role"] for u in boss_stats.recent_users} <= {"ADMIN", "IT_PERSON", "USER"}
        # USER sees only USER accounts
        assert services.dashboard.compute_dashboard(populated["alice"]).total_users == 2

    def test_recent_lists_are_capped(self, services, populated):
        alice = populated["alice"]
        for i in range(4):
            services.tickets.create_ticket(alice, f"Extra {i}", "OTHER")

        stats = services.dashboard.compute_dashboard(populated["boss"])
        assert stats.total_tickets == 7
        assert len(stats.recent_tickets) == 5
        assert len(stats.recent_users) == 4
        assert "password_hash" not in stats.recent_users[0]

    def test_date_window(self, services, populated):
        tomorrow = utc_now() + timedelta(days=1)
        stats = services.dashboard.compute_dashboard(
            populated["admin"], date_from=tomorrow, date_to=tomorrow + timedelta(days=1)
        )
        assert stats.total_tickets == 0

    def test_inverted_window_is_rejected(self, services, populated):
        now = utc_now()
        with pytest.raises(ValidationError):
            services.dashboard.compute_dashboard(
                populated["admin"], date_from=now, date_to=now - timedelta(days=1)
            )


class TestSnapshots:
    def test_each_call_adds_a_snapshot(self, services, populated):
        admin = populated["admin"]
        services.dashboard.compute_dashboard(admin)
        services.dashboard.compute_dashboard(admin)

        snapshots = services.dashboard.historical(admin)
        assert len(snapshots) == 2
        assert all(s.total_tickets == 3 for s in snapshots)
        assert snapshots[0].date <= snapshots[1].date

    def test_history_is_per_caller(self, services, populated):
        services.dashboard.compute_dashboard(populated["admin"])
        assert services.dashboard.historical(populated["boss"]) == []

    def test_history_window(self, services, populated):
        admin = populated["admin"]
        services.dashboard.compute_dashboard(admin)
        past = utc_now() - timedelta(days=30)
        assert services.dashboard.historical(admin, past, past + timedelta(days=1)) == []
