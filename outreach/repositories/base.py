"""
Result Store Interface Definitions

Defines the abstract interface for the outreach result store: one record
per (user, company) that accumulates pipeline output across stages, plus
two append-only history logs for composed emails and LinkedIn messages.

Implementations are synchronous; async callers run them through
``asyncio.to_thread``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

HISTORY_KINDS = ("email", "linkedin")


def normalize_key(value: Optional[str]) -> str:
    """Normalize a company or role name for keyed lookups."""
    return " ".join((value or "").lower().split())


@dataclass
class WriteResult:
    """
    Result of a write operation.

    Attributes:
        matched_count: Number of documents that matched the filter
        modified_count: Number of documents actually modified
        upserted_id: ID of upserted document (if any)
    """
    matched_count: int
    modified_count: int
    upserted_id: Optional[str] = None


class ResultStoreInterface(ABC):
    """
    Abstract interface for contact result records and message history.

    Records are keyed by ``(user_id, company_key)``. Writes are
    last-writer-wins; no optimistic concurrency is applied.
    """

    # ===== contact_results =====

    @abstractmethod
    def find_record(self, user_id: str, company_key: str) -> Optional[Dict[str, Any]]:
        """
        Find the record for a user and normalized company name.

        Returns:
            Document dict if found, None otherwise
        """

    @abstractmethod
    def find_record_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        """Find a record by its id. Unknown or malformed ids return None."""

    @abstractmethod
    def upsert_record(self, user_id: str, company_key: str, fields: Dict[str, Any]) -> str:
        """
        Create or update the record for (user_id, company_key).

        Args:
            user_id: Owner of the record
            company_key: Normalized company name
            fields: Top-level fields to $set

        Returns:
            The record id (existing or newly created)
        """

    @abstractmethod
    def update_record(self, record_id: str, fields: Dict[str, Any]) -> WriteResult:
        """$set fields on an existing record."""

    @abstractmethod
    def find_recent_for_cache(self, company_key: str, role_key: str) -> Optional[Dict[str, Any]]:
        """
        Find the most recently cached record for a company and role.

        Only records holding both a research and a verified document are
        considered. Freshness is judged by the caller.
        """

    @abstractmethod
    def list_records(self, user_id: str, limit: int = 100) -> List[Dict[str, Any]]:
        """List a user's records, newest first."""

    # ===== email_history / linkedin_history =====

    @abstractmethod
    def insert_history(self, kind: str, entry: Dict[str, Any]) -> str:
        """
        Append a history row.

        Args:
            kind: "email" or "linkedin"
            entry: Row fields (user_id, company_name, content, ...)

        Returns:
            Inserted row id
        """

    @abstractmethod
    def list_history(self, kind: str, user_id: str, limit: int = 500) -> List[Dict[str, Any]]:
        """List a user's history rows of one kind, newest first."""

    @abstractmethod
    def delete_history(self, kind: str, user_id: str, entry_id: str) -> bool:
        """Delete one history row owned by user_id. Returns False if nothing matched."""

    @abstractmethod
    def ensure_indexes(self) -> None:
        """Ensure required indexes exist."""


def record_timestamp(record: Dict[str, Any], field: str = "cached_at") -> Optional[datetime]:
    value = record.get(field)
    return value if isinstance(value, datetime) else None
