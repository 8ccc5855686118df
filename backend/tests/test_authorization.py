import pytest

from helpdesk.domain.enums import Role
from helpdesk.domain.errors import ForbiddenError
from helpdesk.engine.authorization import AuthorizationPolicy

ALLOWED_CREATIONS = {
    (Role.SYSTEM_OWNER, Role.SUPER_ADMIN),
    (Role.SUPER_ADMIN, Role.ADMIN),
    (Role.ADMIN, Role.IT_PERSON),
    (Role.ADMIN, Role.USER),
    (Role.IT_PERSON, Role.USER),
}


class TestCanCreateRole:
    @pytest.mark.parametrize("actor", list(Role))
    @pytest.mark.parametrize("target", list(Role))
    def test_matches_hierarchy_table(self, actor, target):
        expected = (actor, target) in ALLOWED_CREATIONS
        assert AuthorizationPolicy.can_create_role(actor, target) is expected

    def test_no_transitive_shortcuts(self):
        assert not AuthorizationPolicy.can_create_role(Role.SYSTEM_OWNER, Role.ADMIN)
        assert not AuthorizationPolicy.can_create_role(Role.SUPER_ADMIN, Role.USER)

    def test_accepts_plain_strings(self):
        assert AuthorizationPolicy.can_create_role("ADMIN", "IT_PERSON")

    def test_require_create_raises_forbidden(self):
        with pytest.raises(ForbiddenError):
            AuthorizationPolicy().require_create(Role.ADMIN, Role.ADMIN)


class TestCanAccessRoute:
    def test_member_is_allowed(self):
        assert AuthorizationPolicy.can_access_route(Role.ADMIN, {Role.ADMIN, Role.IT_PERSON})

    def test_non_member_is_denied(self):
        assert not AuthorizationPolicy.can_access_route(Role.USER, {Role.ADMIN, Role.IT_PERSON})

    def test_higher_role_is_not_implicitly_allowed(self):
        assert not AuthorizationPolicy.can_access_route(Role.SYSTEM_OWNER, {Role.ADMIN})

    def test_expired_has_no_access(self):
        assert not AuthorizationPolicy.can_access_route(Role.EXPIRED, {Role.SUPER_ADMIN})

    def test_require_route_raises_forbidden(self):
        with pytest.raises(ForbiddenError) as exc:
            AuthorizationPolicy().require_route(Role.USER, [Role.ADMIN])
        assert exc.value.http_status == 403


class TestRanking:
    def test_outranks_is_strict(self):
        assert AuthorizationPolicy.outranks(Role.SUPER_ADMIN, Role.ADMIN)
        assert not AuthorizationPolicy.outranks(Role.ADMIN, Role.ADMIN)
        assert not AuthorizationPolicy.outranks(Role.USER, Role.IT_PERSON)

    def test_visibility_ceiling(self):
        assert AuthorizationPolicy.visible_roles(Role.SUPER_ADMIN) == {Role.ADMIN, Role.IT_PERSON, Role.USER}
        assert AuthorizationPolicy.visible_roles(Role.SYSTEM_OWNER) == {Role.ADMIN, Role.IT_PERSON, Role.USER}
        assert AuthorizationPolicy.visible_roles(Role.ADMIN) == {Role.IT_PERSON, Role.USER}
        assert AuthorizationPolicy.visible_roles(Role.IT_PERSON) == {Role.USER}
        assert AuthorizationPolicy.visible_roles(Role.USER) == {Role.USER}
