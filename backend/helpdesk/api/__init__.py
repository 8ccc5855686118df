"""API module - Routes and dependencies"""
from .deps import get_current_user_dep, get_services, require_roles

__all__ = ["get_current_user_dep", "get_services", "require_roles"]
