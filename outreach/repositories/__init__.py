"""
Result store repositories.

The pipeline depends only on ResultStoreInterface; MongoResultStore is the
production implementation.
"""

from outreach.repositories.base import (
    HISTORY_KINDS,
    ResultStoreInterface,
    WriteResult,
    normalize_key,
)
from outreach.repositories.mongo_result_store import MongoResultStore

__all__ = [
    "HISTORY_KINDS",
    "ResultStoreInterface",
    "WriteResult",
    "normalize_key",
    "MongoResultStore",
]
