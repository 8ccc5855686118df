"""Archive Repository - Cold storage for aged-out rows"""
from typing import Any, Dict, List, Optional
from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database

from ..domain.models import ArchivedData
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ArchiveRepository:
    """Repository for archived_data envelopes (insert-only)"""

    def __init__(self, db: Database):
        self._archive: Collection = db["archived_data"]

    def archive(self, envelope: ArchivedData) -> ArchivedData:
        """Persist an archive envelope"""
        doc = envelope.model_dump()
        doc["_id"] = envelope.archive_id
        self._archive.insert_one(doc)
        return envelope

    def list_archived(
        self,
        table_name: Optional[str] = None,
        limit: int = 100
    ) -> List[ArchivedData]:
        """Archived envelopes, most recently archived first"""
        query: Dict[str, Any] = {}
        if table_name:
            query["table_name"] = table_name

        cursor = self._archive.find(query).sort("archived_at", DESCENDING).limit(limit)
        items = []
        for doc in cursor:
            doc.pop("_id", None)
            items.append(ArchivedData.model_validate(doc))
        return items

    def count_archived(self, table_name: Optional[str] = None) -> int:
        query: Dict[str, Any] = {}
        if table_name:
            query["table_name"] = table_name
        return self._archive.count_documents(query)
