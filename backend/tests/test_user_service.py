from datetime import timedelta

import pytest

from helpdesk.domain.enums import Role, AuditAction
from helpdesk.domain.errors import (
    ForbiddenError, UserNotFoundError, ValidationError
)
from helpdesk.utils.time import utc_now


class TestCreateUser:
    @pytest.mark.parametrize("creator,target", [
        (Role.SYSTEM_OWNER, Role.SUPER_ADMIN),
        (Role.SUPER_ADMIN, Role.ADMIN),
        (Role.ADMIN, Role.IT_PERSON),
        (Role.ADMIN, Role.USER),
        (Role.IT_PERSON, Role.USER),
    ])
    def test_allowed_creations(self, services, make_user, actor_for, creator, target):
        actor = actor_for(make_user(creator, "creator"))
        user = services.users.create_user(
            actor, "newbie", "newbie@example.com", "secret1", target, business_type="LARGE"
        )
        assert user.role == target.value

    @pytest.mark.parametrize("creator,target", [
        (Role.SYSTEM_OWNER, Role.ADMIN),
        (Role.SUPER_ADMIN, Role.SUPER_ADMIN),
        (Role.ADMIN, Role.ADMIN),
        (Role.IT_PERSON, Role.IT_PERSON),
        (Role.USER, Role.USER),
    ])
    def test_refused_creations(self, services, make_user, actor_for, creator, target):
        actor = actor_for(make_user(creator, "creator"))
        with pytest.raises(ForbiddenError):
            services.users.create_user(actor, "newbie", "newbie@example.com", "secret1", target)
        assert services.user_repo.get_user_by_email("newbie@example.com") is None

    def test_super_admin_gets_an_account(self, services, make_user, actor_for, settings):
        owner = actor_for(make_user(Role.SYSTEM_OWNER, "owner"))
        boss = services.users.create_user(
            owner, "boss", "boss@example.com", "secret1", "SUPER_ADMIN", business_type="MEDIUM"
        )

        account = services.user_repo.get_account(boss.user_id)
        assert account is not None
        remaining = account.expiry_date - utc_now()
        assert timedelta(days=settings.super_admin_account_days - 1) < remaining
        assert remaining <= timedelta(days=settings.super_admin_account_days)

        actions = [e.action for e in services.audit_repo.get_entries(user_id=owner.user_id)]
        assert actions == [AuditAction.SUPER_ADMIN_CREATED.value]

    def test_super_admin_needs_business_type(self, services, make_user, actor_for):
        owner = actor_for(make_user(Role.SYSTEM_OWNER, "owner"))
        with pytest.raises(ValidationError):
            services.users.create_user(owner, "boss", "boss@example.com", "secret1", "SUPER_ADMIN")

    def test_unknown_role(self, services, make_user, actor_for):
        admin = actor_for(make_user(Role.ADMIN, "admin"))
        with pytest.raises(ValidationError):
            services.users.create_user(admin, "x", "x@example.com", "secret1", "JANITOR")


class TestDeleteUser:
    def test_deleting_super_admin_removes_account(self, services, make_user, actor_for):
        owner = actor_for(make_user(Role.SYSTEM_OWNER, "owner"))
        boss = make_user(Role.SUPER_ADMIN, "boss")

        services.users.delete_user(
            owner, boss.user_id, [Role.SUPER_ADMIN, Role.EXPIRED], AuditAction.SUPER_ADMIN_DELETED
        )

        assert services.user_repo.get_user(boss.user_id) is None
        assert services.user_repo.get_account(boss.user_id) is None

    def test_role_outside_allowed_set_looks_missing(self, services, make_user, actor_for):
        admin = actor_for(make_user(Role.ADMIN, "admin"))
        peer = make_user(Role.ADMIN, "peer")
        with pytest.raises(UserNotFoundError):
            services.users.delete_user(admin, peer.user_id, [Role.IT_PERSON, Role.USER])

    def test_cannot_delete_equal_rank(self, services, make_user, actor_for):
        admin = actor_for(make_user(Role.ADMIN, "admin"))
        peer = make_user(Role.ADMIN, "peer")
        with pytest.raises(ForbiddenError):
            services.users.delete_user(admin, peer.user_id)
        assert services.user_repo.get_user(peer.user_id) is not None

    def test_admin_deletes_it_person(self, services, make_user, actor_for):
        admin = actor_for(make_user(Role.ADMIN, "admin"))
        bob = make_user(Role.IT_PERSON, "bob")
        services.users.delete_user(admin, bob.user_id, [Role.IT_PERSON, Role.USER])
        assert services.user_repo.get_user(bob.user_id) is None


class TestSuperAdminExpiry:
    def test_renewal_restores_expired_super_admin(self, services, make_user, actor_for):
        owner = actor_for(make_user(Role.SYSTEM_OWNER, "owner"))
        boss = make_user(Role.SUPER_ADMIN, "boss")
        services.user_repo.set_role(boss.user_id, Role.EXPIRED)

        new_expiry = utc_now() + timedelta(days=90)
        account = services.users.update_super_admin_expiry(owner, boss.user_id, new_expiry)

        assert account.expiry_date > utc_now() + timedelta(days=89)
        assert services.user_repo.get_user(boss.user_id).role == Role.SUPER_ADMIN.value

    def test_past_date_keeps_expired(self, services, make_user, actor_for):
        owner = actor_for(make_user(Role.SYSTEM_OWNER, "owner"))
        boss = make_user(Role.SUPER_ADMIN, "boss")
        services.user_repo.set_role(boss.user_id, Role.EXPIRED)

        services.users.update_super_admin_expiry(owner, boss.user_id, utc_now() - timedelta(days=1))
        assert services.user_repo.get_user(boss.user_id).role == Role.EXPIRED.value

    def test_missing_account_is_created(self, services, make_user, actor_for):
        owner = actor_for(make_user(Role.SYSTEM_OWNER, "owner"))
        boss = make_user(Role.SUPER_ADMIN, "boss")
        services.user_repo.delete_account(boss.user_id)

        services.users.update_super_admin_expiry(owner, boss.user_id, utc_now() + timedelta(days=5))
        assert services.user_repo.get_account(boss.user_id) is not None

    def test_only_super_admins(self, services, make_user, actor_for):
        owner = actor_for(make_user(Role.SYSTEM_OWNER, "owner"))
        admin = make_user(Role.ADMIN, "admin")
        with pytest.raises(UserNotFoundError):
            services.users.update_super_admin_expiry(owner, admin.user_id, utc_now())


class TestChangeRole:
    def test_super_admin_promotes_user_to_admin(self, services, make_user, actor_for):
        boss = actor_for(make_user(Role.SUPER_ADMIN, "boss"))
        alice = make_user(Role.USER, "alice")
        user = services.users.change_role(boss, alice.user_id, "ADMIN")
        assert user.role == Role.ADMIN.value

    def test_cannot_grant_own_rank(self, services, make_user, actor_for):
        boss = actor_for(make_user(Role.SUPER_ADMIN, "boss"))
        alice = make_user(Role.USER, "alice")
        with pytest.raises(ForbiddenError):
            services.users.change_role(boss, alice.user_id, "SUPER_ADMIN")

    def test_cannot_change_equal_rank(self, services, make_user, actor_for):
        admin = actor_for(make_user(Role.ADMIN, "admin"))
        peer = make_user(Role.ADMIN, "peer")
        with pytest.raises(ForbiddenError):
            services.users.change_role(admin, peer.user_id, "USER")

    def test_expired_is_not_assignable(self, services, make_user, actor_for):
        owner = actor_for(make_user(Role.SYSTEM_OWNER, "owner"))
        boss = make_user(Role.SUPER_ADMIN, "boss")
        with pytest.raises(ValidationError):
            services.users.change_role(owner, boss.user_id, "EXPIRED")


class TestReadsAndUpdates:
    def test_user_reads_self_only(self, services, make_user, actor_for):
        alice = make_user(Role.USER, "alice")
        carol = make_user(Role.USER, "carol")
        assert services.users.get_user(actor_for(alice), alice.user_id).username == "alice"
        with pytest.raises(ForbiddenError):
            services.users.get_user(actor_for(alice), carol.user_id)

    def test_update_own_email_and_password(self, services, make_user, actor_for):
        alice = make_user(Role.USER, "alice")
        services.users.update_user(
            actor_for(alice), alice.user_id, email="Alice@New.com", password="new-secret"
        )
        result = services.credentials.login("alice@new.com", "new-secret")
        assert result["user"].user_id == alice.user_id

    def test_empty_update_is_rejected(self, services, make_user, actor_for):
        alice = make_user(Role.USER, "alice")
        with pytest.raises(ValidationError):
            services.users.update_user(actor_for(alice), alice.user_id)

    def test_list_managed_respects_visibility(self, services, make_user, actor_for):
        admin = actor_for(make_user(Role.ADMIN, "admin"))
        boss = actor_for(make_user(Role.SUPER_ADMIN, "boss"))
        make_user(Role.IT_PERSON, "bob")
        make_user(Role.USER, "alice")

        assert set(services.users.list_managed(admin)) == {"it_persons", "users"}
        groups = services.users.list_managed(boss)
        assert [u.username for u in groups["admins"]] == ["admin"]

    def test_list_by_business_type(self, services, make_user):
        make_user(Role.SUPER_ADMIN, "small_boss")
        make_user(Role.SUPER_ADMIN, "large_boss", business_type="LARGE")
        assert [u.username for u in services.users.list_by_business_type("LARGE")] == ["large_boss"]


class TestEnsureSystemOwner:
    def test_is_idempotent(self, services):
        first = services.users.ensure_system_owner("owner", "owner@example.com", "secret1")
        second = services.users.ensure_system_owner("owner2", "owner2@example.com", "secret1")

        assert first.role == Role.SYSTEM_OWNER.value
        assert second is None
        assert services.user_repo.count_users([Role.SYSTEM_OWNER]) == 1
