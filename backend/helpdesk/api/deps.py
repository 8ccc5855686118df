"""API Dependencies - Common dependencies for routes"""
from typing import Callable, Optional
from fastapi import Depends, Header, Request

from ..domain.models import ActorContext
from ..domain.enums import Role
from ..domain.errors import InvalidTokenError
from ..services.container import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    """The service graph built for this application instance"""
    return request.app.state.services


async def get_current_user_dep(
    authorization: Optional[str] = Header(None),
    services: ServiceContainer = Depends(get_services)
) -> ActorContext:
    """
    Dependency to get current user from Authorization header

    Validates the bearer token, then re-reads the live role from the store.

    Raises:
        InvalidTokenError: 401 if token is missing, invalid or expired
    """
    if not authorization:
        raise InvalidTokenError("Authorization header is missing")
    if not authorization.startswith("Bearer "):
        raise InvalidTokenError("Authorization header must use the Bearer scheme")

    return services.credentials.verify(authorization)


def require_roles(*roles: Role) -> Callable[..., ActorContext]:
    """
    Build a dependency that admits only the given live roles

    Usage:
        actor: ActorContext = Depends(require_roles(Role.ADMIN))
    """
    async def _dependency(
        actor: ActorContext = Depends(get_current_user_dep),
        services: ServiceContainer = Depends(get_services)
    ) -> ActorContext:
        services.policy.require_route(actor.role, roles)
        return actor

    return _dependency


def get_client_ip(request: Request) -> Optional[str]:
    """Caller address as seen by the server"""
    return request.client.host if request.client else None
