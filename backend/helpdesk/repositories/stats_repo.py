"""Dashboard Stats Repository - Historical dashboard snapshots"""
from typing import List, Optional
from datetime import datetime
from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.database import Database

from ..domain.models import DashboardSnapshot


class DashboardStatsRepository:
    """Repository for per-caller dashboard snapshots"""

    def __init__(self, db: Database):
        self._stats: Collection = db["dashboard_stats"]

    def save_snapshot(self, snapshot: DashboardSnapshot) -> DashboardSnapshot:
        doc = snapshot.model_dump()
        doc["_id"] = snapshot.stats_id
        self._stats.insert_one(doc)
        return snapshot

    def list_snapshots(
        self,
        user_id: str,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> List[DashboardSnapshot]:
        """Snapshots for a caller in [date_from, date_to], oldest first"""
        query = {"user_id": user_id}
        window = {}
        if date_from is not None:
            window["$gte"] = date_from
        if date_to is not None:
            window["$lte"] = date_to
        if window:
            query["date"] = window

        snapshots = []
        for doc in self._stats.find(query).sort("date", ASCENDING):
            doc.pop("_id", None)
            snapshots.append(DashboardSnapshot.model_validate(doc))
        return snapshots
