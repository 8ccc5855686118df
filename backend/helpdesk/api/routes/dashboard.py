"""
Dashboard Routes

Aggregate counts and the caller's historical snapshots.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query

from ..deps import get_current_user_dep, get_services, require_roles
from ...domain.models import ActorContext
from ...domain.enums import Role
from ...services.container import ServiceContainer
from ...utils.time import to_naive_utc

router = APIRouter()


@router.get("/stats")
async def dashboard_stats(
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    actor: ActorContext = Depends(get_current_user_dep),
    services: ServiceContainer = Depends(get_services)
):
    """
    Dashboard counts

    Tickets may be limited to creation time in [from, to]. Each call
    also stores a snapshot for the historical view.
    """
    stats = services.dashboard.compute_dashboard(
        actor,
        date_from=to_naive_utc(date_from) if date_from else None,
        date_to=to_naive_utc(date_to) if date_to else None
    )
    return stats.model_dump(mode="json")


@router.get("/historical")
async def historical_stats(
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    actor: ActorContext = Depends(require_roles(Role.ADMIN, Role.SUPER_ADMIN)),
    services: ServiceContainer = Depends(get_services)
):
    snapshots = services.dashboard.historical(
        actor,
        date_from=to_naive_utc(date_from) if date_from else None,
        date_to=to_naive_utc(date_to) if date_to else None
    )
    return [s.model_dump(mode="json") for s in snapshots]
