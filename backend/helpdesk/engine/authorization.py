"""Authorization Policy - Single source of role hierarchy rules"""
from typing import Dict, FrozenSet, Iterable, Union

from ..domain.enums import Role
from ..domain.errors import ForbiddenError
from ..utils.logger import get_logger

logger = get_logger(__name__)

RoleLike = Union[Role, str]


# Who may create whom. Strict: no transitive shortcuts.
CREATION_HIERARCHY: Dict[Role, FrozenSet[Role]] = {
    Role.SYSTEM_OWNER: frozenset({Role.SUPER_ADMIN}),
    Role.SUPER_ADMIN: frozenset({Role.ADMIN}),
    Role.ADMIN: frozenset({Role.IT_PERSON, Role.USER}),
    Role.IT_PERSON: frozenset({Role.USER}),
    Role.USER: frozenset(),
    Role.EXPIRED: frozenset(),
}

# Higher number = more privilege. EXPIRED carries none.
ROLE_RANK: Dict[Role, int] = {
    Role.SYSTEM_OWNER: 5,
    Role.SUPER_ADMIN: 4,
    Role.ADMIN: 3,
    Role.IT_PERSON: 2,
    Role.USER: 1,
    Role.EXPIRED: 0,
}

# Users each role may see in dashboards and listings
VISIBLE_ROLES: Dict[Role, FrozenSet[Role]] = {
    Role.SYSTEM_OWNER: frozenset({Role.ADMIN, Role.IT_PERSON, Role.USER}),
    Role.SUPER_ADMIN: frozenset({Role.ADMIN, Role.IT_PERSON, Role.USER}),
    Role.ADMIN: frozenset({Role.IT_PERSON, Role.USER}),
}


class AuthorizationPolicy:
    """
    Pure role checks

    Route gates and creation rules both live here so that route
    declarations cannot drift from the hierarchy.
    """

    @staticmethod
    def can_create_role(actor_role: RoleLike, target_role: RoleLike) -> bool:
        """Check if actor_role may create an account with target_role"""
        return Role(target_role) in CREATION_HIERARCHY[Role(actor_role)]

    @staticmethod
    def can_access_route(actor_role: RoleLike, allowed_roles: Iterable[RoleLike]) -> bool:
        """Set-membership check of the caller's live role"""
        return Role(actor_role) in {Role(r) for r in allowed_roles}

    @staticmethod
    def outranks(actor_role: RoleLike, other_role: RoleLike) -> bool:
        """Strictly higher in the hierarchy"""
        return ROLE_RANK[Role(actor_role)] > ROLE_RANK[Role(other_role)]

    @staticmethod
    def visible_roles(actor_role: RoleLike) -> FrozenSet[Role]:
        """Role-visibility ceiling for user listings"""
        return VISIBLE_ROLES.get(Role(actor_role), frozenset({Role.USER}))

    # =========================================================================
    # Enforcing variants
    # =========================================================================

    def require_route(self, actor_role: RoleLike, allowed_roles: Iterable[RoleLike]) -> None:
        """Raise ForbiddenError unless the role is in the allowed set"""
        allowed = [Role(r) for r in allowed_roles]
        if not self.can_access_route(actor_role, allowed):
            logger.warning(
                f"Role {Role(actor_role).value} denied; requires one of {[r.value for r in allowed]}",
                extra={"role": Role(actor_role).value}
            )
            raise ForbiddenError(
                "Insufficient role for this action",
                details={"role": Role(actor_role).value}
            )

    def require_create(self, actor_role: RoleLike, target_role: RoleLike) -> None:
        """Raise ForbiddenError unless actor_role may create target_role"""
        if not self.can_create_role(actor_role, target_role):
            raise ForbiddenError(
                f"{Role(actor_role).value} cannot create {Role(target_role).value}",
                details={"role": Role(actor_role).value, "target_role": Role(target_role).value}
            )

    def require_manage(self, actor_role: RoleLike, target_role: RoleLike) -> None:
        """Raise ForbiddenError unless actor_role strictly outranks target_role"""
        if not self.outranks(actor_role, target_role):
            raise ForbiddenError(
                f"{Role(actor_role).value} cannot manage {Role(target_role).value}",
                details={"role": Role(actor_role).value, "target_role": Role(target_role).value}
            )
