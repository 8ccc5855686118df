"""API Routes module"""
from fastapi import APIRouter

from .auth import router as auth_router
from .tickets import router as tickets_router
from .users import router as users_router
from .dashboard import router as dashboard_router
from .admin import router as admin_router
from .superadmin import router as superadmin_router
from .it import router as it_router
from .system import router as system_router

# Main API router
api_router = APIRouter()

# Include all route modules
api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(tickets_router, prefix="/tickets", tags=["Tickets"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(admin_router, prefix="/admin", tags=["Admin"])
api_router.include_router(superadmin_router, prefix="/superadmin", tags=["Super Admin"])
api_router.include_router(it_router, prefix="/it", tags=["IT Person"])
api_router.include_router(system_router, prefix="/system", tags=["System Owner"])

__all__ = ["api_router"]
