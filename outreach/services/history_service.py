"""
Message history and contact result listings.

History rows are append-only; the only mutation offered is owner-scoped
deletion.
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, List

from outreach.pipeline.contacts import (
    coerce_contact,
    coerce_contact_info,
    contact_label,
    is_usable,
    resolve_contact_with_tier,
)
from outreach.repositories.base import HISTORY_KINDS, ResultStoreInterface

logger = logging.getLogger(__name__)

MAX_HISTORY_COMPANIES = 50
MAX_HISTORY_ROWS = 500
MAX_CONTACT_RESULTS = 100


class HistoryService:
    """Read and delete a user's message history and contact results."""

    def __init__(self, store: ResultStoreInterface):
        self.store = store

    def list_grouped(self, kind: str, user_id: str, max_companies: int = MAX_HISTORY_COMPANIES) -> List[Dict[str, Any]]:
        """
        Latest message per company, newest company first.

        Each entry is the latest row plus ``total_count`` and
        ``all_messages`` (every row for that company, newest first).
        """
        _check_kind(kind)
        rows = self.store.list_history(kind, user_id, limit=MAX_HISTORY_ROWS)

        groups: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
        for row in rows:  # already newest first
            groups.setdefault(row.get("company_name") or "", []).append(row)

        result = []
        for messages in list(groups.values())[:max_companies]:
            latest = dict(messages[0])
            latest["total_count"] = len(messages)
            latest["all_messages"] = messages
            result.append(latest)
        return result

    def delete(self, kind: str, user_id: str, entry_id: str) -> bool:
        _check_kind(kind)
        deleted = self.store.delete_history(kind, user_id, entry_id)
        if deleted:
            logger.info(f"Deleted {kind} history entry {entry_id}")
        return deleted

    def list_contact_results(self, user_id: str, limit: int = MAX_CONTACT_RESULTS) -> List[Dict[str, Any]]:
        """
        A user's records, newest first, with the display contact resolved.

        The tiered contact in research_data is resolved first; the stored
        top-level contact fields are the fallback.
        """
        results = []
        for record in self.store.list_records(user_id, limit=limit):
            stored = coerce_contact(
                {
                    "name": record.get("contact_name"),
                    "title": record.get("contact_title"),
                    "email": record.get("contact_email"),
                    "inferred": record.get("email_inferred", False),
                }
            )
            research_data = record.get("research_data") or {}
            contact, tier = resolve_contact_with_tier(coerce_contact_info(research_data.get("contact")))
            if contact is None and is_usable(stored):
                contact, tier = stored, "primary"
            results.append(
                {
                    **record,
                    "contact": contact.model_dump(mode="json") if contact else None,
                    "contact_label": contact_label(tier, contact) if contact else None,
                }
            )
        return results


def _check_kind(kind: str) -> None:
    if kind not in HISTORY_KINDS:
        raise ValueError(f"Unknown history kind: {kind}")
