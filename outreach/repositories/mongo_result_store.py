"""
MongoDB Result Store

pymongo implementation of ResultStoreInterface. The database handle is
injected; connection lifecycle belongs to whoever created the client
(the API lifespan, or a test).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.database import Database

from outreach.common.error_handling import log_on_exception
from outreach.repositories.base import HISTORY_KINDS, ResultStoreInterface, WriteResult

logger = logging.getLogger(__name__)

RESULTS_COLLECTION = "contact_results"
HISTORY_COLLECTIONS = {
    "email": "email_history",
    "linkedin": "linkedin_history",
}


def _to_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Expose ``_id`` as a string ``id`` so callers never handle ObjectId."""
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


class MongoResultStore(ResultStoreInterface):
    """
    Result store backed by three MongoDB collections.

    - contact_results: one document per (user_id, company_key)
    - email_history / linkedin_history: append-only message logs
    """

    def __init__(self, db: Database):
        self._db = db

    @classmethod
    def from_client(cls, client: MongoClient, database: str) -> "MongoResultStore":
        return cls(client[database])

    @property
    def _results(self):
        return self._db[RESULTS_COLLECTION]

    def _history(self, kind: str):
        if kind not in HISTORY_KINDS:
            raise ValueError(f"Unknown history kind: {kind}")
        return self._db[HISTORY_COLLECTIONS[kind]]

    # ===== contact_results =====

    def find_record(self, user_id: str, company_key: str) -> Optional[Dict[str, Any]]:
        return _serialize(self._results.find_one({"user_id": user_id, "company_key": company_key}))

    def find_record_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        oid = _to_object_id(record_id)
        if oid is None:
            return None
        return _serialize(self._results.find_one({"_id": oid}))

    def upsert_record(self, user_id: str, company_key: str, fields: Dict[str, Any]) -> str:
        now = datetime.now(timezone.utc)
        doc = self._results.find_one_and_update(
            {"user_id": user_id, "company_key": company_key},
            {
                "$set": {**fields, "updated_at": now},
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
            projection={"_id": 1},
        )
        return str(doc["_id"])

    def update_record(self, record_id: str, fields: Dict[str, Any]) -> WriteResult:
        oid = _to_object_id(record_id)
        if oid is None:
            return WriteResult(matched_count=0, modified_count=0)
        result = self._results.update_one(
            {"_id": oid},
            {"$set": {**fields, "updated_at": datetime.now(timezone.utc)}},
        )
        return WriteResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    def find_recent_for_cache(self, company_key: str, role_key: str) -> Optional[Dict[str, Any]]:
        cursor = (
            self._results.find(
                {
                    "company_key": company_key,
                    "role_key": role_key,
                    "research_data.research": {"$exists": True},
                    "research_data.verified": {"$exists": True},
                    "cached_at": {"$ne": None},
                }
            )
            .sort("cached_at", DESCENDING)
            .limit(1)
        )
        for doc in cursor:
            return _serialize(doc)
        return None

    def list_records(self, user_id: str, limit: int = 100) -> List[Dict[str, Any]]:
        cursor = self._results.find({"user_id": user_id}).sort("created_at", DESCENDING).limit(limit)
        return [_serialize(doc) for doc in cursor]

    # ===== history =====

    def insert_history(self, kind: str, entry: Dict[str, Any]) -> str:
        row = {**entry}
        row.setdefault("created_at", datetime.now(timezone.utc))
        result = self._history(kind).insert_one(row)
        return str(result.inserted_id)

    def list_history(self, kind: str, user_id: str, limit: int = 500) -> List[Dict[str, Any]]:
        cursor = self._history(kind).find({"user_id": user_id}).sort("created_at", DESCENDING).limit(limit)
        return [_serialize(doc) for doc in cursor]

    def delete_history(self, kind: str, user_id: str, entry_id: str) -> bool:
        oid = _to_object_id(entry_id)
        if oid is None:
            return False
        result = self._history(kind).delete_one({"_id": oid, "user_id": user_id})
        return result.deleted_count > 0

    def ensure_indexes(self) -> None:
        with log_on_exception(logger, "Result store index creation", level=logging.ERROR):
            self._results.create_index(
                [("user_id", ASCENDING), ("company_key", ASCENDING)],
                unique=True,
                name="user_company_unique",
            )
            self._results.create_index(
                [("company_key", ASCENDING), ("role_key", ASCENDING), ("cached_at", DESCENDING)],
                name="run_cache_lookup",
            )
            for kind in HISTORY_KINDS:
                self._history(kind).create_index(
                    [("user_id", ASCENDING), ("created_at", DESCENDING)],
                    name="user_recent",
                )
        logger.info("Result store indexes ensured")
