"""Audit Repository - Data access for audit log entries"""
from typing import Any, Dict, List, Optional
from datetime import datetime
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo import ASCENDING, DESCENDING

from ..domain.models import AuditLog
from ..utils.logger import get_logger

logger = get_logger(__name__)


class AuditRepository:
    """Repository for audit log operations (append-only)"""

    def __init__(self, db: Database):
        self._audit_logs: Collection = db["audit_logs"]

    def create_entry(self, entry: AuditLog) -> AuditLog:
        """Create an audit entry (append-only)"""
        doc = entry.model_dump()
        doc["_id"] = entry.audit_id

        self._audit_logs.insert_one(doc)
        logger.info(
            f"Created audit entry: {entry.action}",
            extra={"user_id": entry.user_id, "action": entry.action}
        )
        return entry

    def get_entries(
        self,
        user_id: Optional[str] = None,
        actions: Optional[List[str]] = None,
        limit: int = 100
    ) -> List[AuditLog]:
        """Get audit entries, newest first"""
        query: Dict[str, Any] = {}
        if user_id:
            query["user_id"] = user_id
        if actions:
            query["action"] = {"$in": list(actions)}

        cursor = self._audit_logs.find(query).sort("created_at", DESCENDING).limit(limit)

        entries = []
        for doc in cursor:
            doc.pop("_id", None)
            entries.append(AuditLog.model_validate(doc))

        return entries

    def count_entries(self, user_id: Optional[str] = None) -> int:
        """Count audit entries"""
        query: Dict[str, Any] = {}
        if user_id:
            query["user_id"] = user_id
        return self._audit_logs.count_documents(query)

    def find_older_than(self, cutoff: datetime) -> List[Dict[str, Any]]:
        """Raw entries created strictly before the cutoff, oldest first"""
        return list(
            self._audit_logs.find({"created_at": {"$lt": cutoff}}).sort("created_at", ASCENDING)
        )

    def delete_entry(self, audit_id: str) -> bool:
        """Remove a single entry (retention sweep only)"""
        return self._audit_logs.delete_one({"audit_id": audit_id}).deleted_count > 0
