"""
Auth Routes

Registration, login and logout.
"""

from fastapi import APIRouter, Depends, Request, status

from ..deps import get_services, get_client_ip
from ...services.container import ServiceContainer
from ...utils.logger import get_logger
from .schemas import RegisterRequest, LoginRequest, user_out

logger = get_logger(__name__)
router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    services: ServiceContainer = Depends(get_services)
):
    """Register a USER account"""
    user = services.credentials.register(
        username=body.username,
        email=body.email,
        password=body.password,
        role=body.role.value if body.role else None,
        location=body.location
    )
    return {"message": "User registered successfully", "user": user_out(user)}


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    services: ServiceContainer = Depends(get_services)
):
    """
    Exchange email and password for a bearer token

    Unknown email and wrong password return the same 401.
    """
    result = services.credentials.login(
        email=body.email,
        password=body.password,
        ip_address=get_client_ip(request),
        device_info=request.headers.get("user-agent")
    )
    return {
        "message": "Login successful",
        "token": result["token"],
        "user": user_out(result["user"])
    }


@router.post("/logout")
async def logout():
    """Tokens are stateless; the client discards its copy"""
    return {"message": "Logged out successfully"}
