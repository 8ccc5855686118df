"""Login History Repository - One row per successful login"""
from typing import Any, Dict, List
from datetime import datetime
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database

from ..domain.models import LoginHistory
from ..utils.logger import get_logger

logger = get_logger(__name__)


class LoginHistoryRepository:
    """Repository for login history rows"""

    def __init__(self, db: Database):
        self._logins: Collection = db["login_history"]

    def record(self, entry: LoginHistory) -> LoginHistory:
        """Insert a login row"""
        doc = entry.model_dump()
        doc["_id"] = entry.login_id
        self._logins.insert_one(doc)
        logger.debug(f"Recorded login for user: {entry.user_id}", extra={"user_id": entry.user_id})
        return entry

    def list_for_user(self, user_id: str, limit: int = 50) -> List[LoginHistory]:
        """Most recent logins for a user"""
        cursor = self._logins.find({"user_id": user_id}).sort("created_at", DESCENDING).limit(limit)
        rows = []
        for doc in cursor:
            doc.pop("_id", None)
            rows.append(LoginHistory.model_validate(doc))
        return rows

    def find_older_than(self, cutoff: datetime) -> List[Dict[str, Any]]:
        """Raw rows created strictly before the cutoff, oldest first"""
        return list(
            self._logins.find({"created_at": {"$lt": cutoff}}).sort("created_at", ASCENDING)
        )

    def delete_row(self, login_id: str) -> bool:
        """Remove a single row (retention sweep only)"""
        return self._logins.delete_one({"login_id": login_id}).deleted_count > 0

    def list_recent(self, limit: int = 10) -> List[LoginHistory]:
        """Most recent logins across all users"""
        rows = []
        for doc in self._logins.find({}).sort("created_at", DESCENDING).limit(limit):
            doc.pop("_id", None)
            rows.append(LoginHistory.model_validate(doc))
        return rows
