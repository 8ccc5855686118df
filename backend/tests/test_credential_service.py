from datetime import timedelta

import jwt
import pytest

from helpdesk.domain.enums import Role, AuditAction
from helpdesk.domain.errors import (
    AccountExpiredError, DuplicateIdentityError, ForbiddenError,
    InvalidCredentialsError, InvalidTokenError
)
from helpdesk.utils.time import utc_now

PASSWORD = "password123"


class TestRegister:
    def test_register_stores_hash_not_plaintext(self, services):
        user = services.credentials.register("alice", "alice@x.com", "pw-secret")
        assert user.role == Role.USER.value
        assert user.password_hash != "pw-secret"
        assert services.credentials.hasher.verify("pw-secret", user.password_hash)

    def test_register_writes_audit_entry(self, services):
        user = services.credentials.register("alice", "alice@x.com", "pw-secret")
        entries = services.audit_repo.get_entries(user_id=user.user_id)
        assert [e.action for e in entries] == [AuditAction.USER_REGISTERED.value]

    @pytest.mark.parametrize("username,email", [
        ("alice", "other@x.com"),   # username collides
        ("other", "alice@x.com"),   # email collides
        ("alice", "alice@x.com"),   # both collide
    ])
    def test_duplicate_identity(self, services, username, email):
        services.credentials.register("alice", "alice@x.com", "pw-secret")
        with pytest.raises(DuplicateIdentityError):
            services.credentials.register(username, email, "pw-secret")

    def test_store_index_rejects_duplicates(self, services, make_user):
        alice = make_user(Role.USER, "alice")
        with pytest.raises(DuplicateIdentityError):
            services.user_repo.create_user(alice.model_copy(update={"user_id": "USR-other"}))

    def test_privileged_role_is_refused(self, services):
        with pytest.raises(ForbiddenError):
            services.credentials.register("eve", "eve@x.com", "pw-secret", role="ADMIN")


class TestLogin:
    def test_login_returns_token_and_records_history(self, services, make_user):
        user = make_user(Role.USER, "alice")
        result = services.credentials.login(
            "alice@example.com", PASSWORD, ip_address="10.0.0.1", device_info="pytest"
        )
        assert result["token"]
        assert result["user"].user_id == user.user_id

        history = services.login_repo.list_for_user(user.user_id)
        assert len(history) == 1
        assert history[0].ip_address == "10.0.0.1"
        actions = [e.action for e in services.audit_repo.get_entries(user_id=user.user_id)]
        assert AuditAction.USER_LOGGED_IN.value in actions

    def test_unknown_email_and_wrong_password_look_the_same(self, services, make_user):
        make_user(Role.USER, "alice")
        with pytest.raises(InvalidCredentialsError) as unknown:
            services.credentials.login("nobody@example.com", PASSWORD)
        with pytest.raises(InvalidCredentialsError) as wrong:
            services.credentials.login("alice@example.com", "wrong-password")
        assert unknown.value.to_dict() == wrong.value.to_dict()

    def test_expired_super_admin_is_downgraded(self, services, make_user):
        boss = make_user(Role.SUPER_ADMIN, "boss")
        services.user_repo.update_account_expiry(boss.user_id, utc_now() - timedelta(days=1))

        with pytest.raises(AccountExpiredError):
            services.credentials.login("boss@example.com", PASSWORD)

        assert services.user_repo.get_user(boss.user_id).role == Role.EXPIRED.value
        assert services.login_repo.list_for_user(boss.user_id) == []

    def test_expired_user_cannot_log_in_again(self, services, make_user):
        make_user(Role.EXPIRED, "former")
        with pytest.raises(AccountExpiredError):
            services.credentials.login("former@example.com", PASSWORD)

    def test_active_super_admin_logs_in(self, services, make_user):
        make_user(Role.SUPER_ADMIN, "boss")
        result = services.credentials.login("boss@example.com", PASSWORD)
        assert result["user"].role == Role.SUPER_ADMIN.value


class TestCheckAndApplyExpiry:
    def test_non_super_admin_passes_through(self, services, make_user):
        user = make_user(Role.ADMIN, "admin")
        assert services.credentials.check_and_apply_expiry(user) is user

    def test_future_expiry_passes(self, services, make_user):
        boss = make_user(Role.SUPER_ADMIN, "boss")
        assert services.credentials.check_and_apply_expiry(boss).role == Role.SUPER_ADMIN.value

    def test_past_expiry_flips_role_and_audits(self, services, make_user):
        boss = make_user(Role.SUPER_ADMIN, "boss")
        services.user_repo.update_account_expiry(boss.user_id, utc_now() - timedelta(minutes=1))

        with pytest.raises(AccountExpiredError):
            services.credentials.check_and_apply_expiry(boss)

        assert services.user_repo.get_user(boss.user_id).role == Role.EXPIRED.value
        actions = [e.action for e in services.audit_repo.get_entries(user_id=boss.user_id)]
        assert AuditAction.ACCOUNT_EXPIRED.value in actions


class TestVerify:
    def test_live_role_wins_over_token_claim(self, services, make_user):
        user = make_user(Role.ADMIN, "admin")
        token = services.credentials.tokens.issue(user.user_id, user.role)

        services.user_repo.set_role(user.user_id, Role.USER)

        actor = services.credentials.verify(f"Bearer {token}")
        assert actor.role == Role.USER

    def test_deleted_user_token_is_rejected(self, services, make_user):
        user = make_user(Role.USER, "alice")
        token = services.credentials.tokens.issue(user.user_id, user.role)
        services.user_repo.delete_user(user.user_id)

        with pytest.raises(InvalidTokenError):
            services.credentials.verify(token)

    def test_token_signed_with_other_secret_is_rejected(self, services, make_user):
        user = make_user(Role.USER, "alice")
        token = jwt.encode(
            {"sub": user.user_id, "role": user.role, "exp": utc_now() + timedelta(hours=1)},
            "some-other-secret",
            algorithm="HS256"
        )
        with pytest.raises(InvalidTokenError):
            services.credentials.verify(token)

    def test_expired_token_is_rejected(self, services, make_user, settings):
        user = make_user(Role.USER, "alice")
        token = jwt.encode(
            {"sub": user.user_id, "role": user.role, "exp": utc_now() - timedelta(hours=1)},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm
        )
        with pytest.raises(InvalidTokenError) as exc:
            services.credentials.verify(token)
        assert exc.value.error_code == "TOKEN_EXPIRED"
