import asyncio
import inspect
from datetime import timedelta

import pytest

from helpdesk.domain.enums import ArchivedTable, AuditAction, Role
from helpdesk.domain.models import AuditLog, LoginHistory, Ticket, TicketNote
from helpdesk.scheduler.retention_scheduler import RetentionScheduler
from helpdesk.utils.idgen import (
    generate_audit_id, generate_login_id, generate_note_id, generate_ticket_id
)
from helpdesk.utils.time import utc_now


def days_ago(days):
    return utc_now() - timedelta(days=days)


@pytest.fixture
def owner(make_user):
    return make_user(Role.USER, "alice")


@pytest.fixture
def seed_ticket(services, owner):
    def _seed(age_days, notes=()):
        created = days_ago(age_days)
        ticket = services.ticket_repo.create_ticket(Ticket(
            ticket_id=generate_ticket_id(),
            title=f"{age_days} days old",
            category="HARDWARE",
            user_id=owner.user_id,
            created_at=created,
            updated_at=created
        ))
        for text in notes:
            services.ticket_repo.add_note(TicketNote(
                note_id=generate_note_id(),
                ticket_id=ticket.ticket_id,
                note=text,
                added_by_id=owner.user_id,
                created_at=created
            ))
        return ticket
    return _seed


def seed_audit(services, user_id, age_days):
    return services.audit_repo.create_entry(AuditLog(
        audit_id=generate_audit_id(),
        action=AuditAction.USER_LOGGED_IN,
        user_id=user_id,
        created_at=days_ago(age_days)
    ))


def seed_login(services, user_id, age_days):
    return services.login_repo.record(LoginHistory(
        login_id=generate_login_id(),
        user_id=user_id,
        ip_address="10.0.0.1",
        created_at=days_ago(age_days)
    ))


class TestRetentionSweep:
    def test_cutoff_is_six_months_back(self, services):
        now = utc_now().replace(month=10, day=15)
        cutoff = services.retention.cutoff(now)
        assert (cutoff.year, cutoff.month, cutoff.day) == (now.year, 4, 15)

    def test_old_ticket_moves_with_its_notes(self, services, seed_ticket):
        old = seed_ticket(7 * 31, notes=["first", "second"])

        result = services.retention.run()

        assert result.archived[ArchivedTable.TICKET.value] == 1
        assert result.failed == {}
        assert services.ticket_repo.get_ticket(old.ticket_id) is None
        assert services.ticket_repo.get_notes(old.ticket_id) == []

        [envelope] = services.archive_repo.list_archived(ArchivedTable.TICKET.value)
        assert envelope.table_name == "Ticket"
        assert envelope.data["ticket_id"] == old.ticket_id
        assert [n["note"] for n in envelope.data["notes"]] == ["first", "second"]

    def test_recent_ticket_is_untouched(self, services, seed_ticket):
        recent = seed_ticket(31)

        result = services.retention.run()

        assert result.archived[ArchivedTable.TICKET.value] == 0
        assert services.ticket_repo.get_ticket(recent.ticket_id) is not None
        assert services.archive_repo.count_archived() == 0

    def test_audit_and_login_rows_are_archived(self, services, owner):
        old_audit = seed_audit(services, owner.user_id, 200)
        seed_audit(services, owner.user_id, 10)
        seed_login(services, owner.user_id, 200)
        fresh_login = seed_login(services, owner.user_id, 10)

        result = services.retention.run()

        assert result.archived[ArchivedTable.AUDIT_LOG.value] == 1
        assert result.archived[ArchivedTable.LOGIN_HISTORY.value] == 1
        remaining_audit = services.audit_repo.get_entries(user_id=owner.user_id)
        assert old_audit.audit_id not in [e.audit_id for e in remaining_audit]
        assert [r.login_id for r in services.login_repo.list_for_user(owner.user_id)] == [
            fresh_login.login_id
        ]

        [envelope] = services.archive_repo.list_archived(ArchivedTable.AUDIT_LOG.value)
        assert envelope.data["audit_id"] == old_audit.audit_id
        assert "_id" not in envelope.data

    def test_failing_table_does_not_stop_the_others(self, services, owner, seed_ticket, monkeypatch):
        seed_ticket(200)
        seed_audit(services, owner.user_id, 200)
        seed_login(services, owner.user_id, 200)

        def broken(cutoff):
            raise RuntimeError("audit collection unavailable")

        monkeypatch.setattr(services.retention.audit_repo, "find_older_than", broken)

        result = services.retention.run()

        assert result.failed == {ArchivedTable.AUDIT_LOG.value: "audit collection unavailable"}
        assert result.archived[ArchivedTable.TICKET.value] == 1
        assert result.archived[ArchivedTable.LOGIN_HISTORY.value] == 1
        assert ArchivedTable.AUDIT_LOG.value not in result.archived

    def test_second_run_finds_nothing(self, services, seed_ticket):
        seed_ticket(200)
        services.retention.run()

        result = services.retention.run()
        assert result.archived[ArchivedTable.TICKET.value] == 0
        assert services.archive_repo.count_archived(ArchivedTable.TICKET.value) == 1


class TestRetentionScheduler:
    def test_job_runs_in_the_thread_pool(self, settings, services):
        scheduler = RetentionScheduler(settings, services.retention)
        assert not inspect.iscoroutinefunction(scheduler._run_sweep)

    def test_registered_job_is_the_sync_sweep(self, settings, services):
        scheduler = RetentionScheduler(settings, services.retention)

        async def start_and_stop():
            scheduler.start()
            job = scheduler.scheduler.get_job("retention_sweep")
            scheduler.stop()
            return job

        job = asyncio.run(start_and_stop())
        assert job.func == scheduler._run_sweep
        assert not scheduler.is_running

    def test_scheduled_run_archives(self, settings, services, seed_ticket):
        old = seed_ticket(200)

        RetentionScheduler(settings, services.retention)._run_sweep()

        assert services.ticket_repo.get_ticket(old.ticket_id) is None
        assert services.archive_repo.count_archived(ArchivedTable.TICKET.value) == 1
