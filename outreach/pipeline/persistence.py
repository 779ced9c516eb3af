"""
Stage persistence for the result store.

Each successful stage merges its output into the (user, company) record:
research creates or reuses the record, verify and messaging merge into it.
Messaging additionally appends one email and one LinkedIn history row.

Writes are last-writer-wins at the record level. Two concurrent runs for
the same user and company can interleave their merges; the later write of
a given field wins. Runs for one key are expected to come from a single
user session, so no version check is applied.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Set

from outreach.common.errors import PersistenceError
from outreach.pipeline.merge import merge_research_data, merge_scalar_fields
from outreach.pipeline.scoring import BASE_SCORE
from outreach.pipeline.types import (
    ComposedMessages,
    Contact,
    PipelineRequest,
    ResearchDoc,
    VerifiedDoc,
)
from outreach.repositories.base import ResultStoreInterface, normalize_key

logger = logging.getLogger(__name__)

STAGES = ("research", "verify", "messaging")


@dataclass
class StagePayload:
    """
    What a stage contributes: research_data keys and top-level fields.

    Names in ``exact_fields`` are written as given, None included, instead
    of going through the non-destructive scalar merge.
    """

    research_data: Dict[str, Any] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)
    exact_fields: Set[str] = field(default_factory=set)


CONTACT_FIELDS = (
    "contact_name",
    "contact_title",
    "contact_email",
    "email_inferred",
    "source_url",
    "source_title",
)


# ===== Payload builders =====

def research_payload(request: PipelineRequest, research: ResearchDoc) -> StagePayload:
    """
    Research output for the record.

    Clears ``cached_at``: the record is not a cache entry again until a
    verify for this role stamps it.
    """
    return StagePayload(
        research_data={
            "research": research.model_dump(mode="json"),
            "companyOverview": research.summary,
            "role": request.role,
            "domain": request.domain,
        },
        fields={
            "role": request.role,
            "confidence_score": BASE_SCORE,
            "cached_at": None,
        },
        exact_fields={"cached_at"},
    )


def verify_payload(
    verified: VerifiedDoc,
    contact: Optional[Contact],
    confidence: float,
    cached_at: datetime,
    role: Optional[str] = None,
) -> StagePayload:
    """
    Verify output for the record.

    ``role_key`` is stamped together with ``cached_at`` so the cache key
    always names the role the verified document was produced for. A
    resolved contact replaces every stored contact field as one unit.
    """
    fields: Dict[str, Any] = {
        "confidence_score": confidence,
        "cached_at": cached_at,
    }
    exact_fields = {"cached_at"}
    if role is not None:
        fields["role_key"] = normalize_key(role)
    if contact is not None:
        fields.update(
            {
                "contact_name": contact.name,
                "contact_title": contact.title,
                "contact_email": contact.email,
                "email_inferred": contact.inferred,
                "source_url": contact.source.url if contact.source else None,
                "source_title": contact.source.title if contact.source else None,
            }
        )
        exact_fields.update(CONTACT_FIELDS)
    return StagePayload(
        research_data={
            "verified": verified.model_dump(mode="json"),
            "verifiedSummary": verified.summary,
            "verifiedPoints": [p.model_dump(mode="json") for p in verified.points],
            "contact": contact.model_dump(mode="json") if contact else None,
        },
        fields=fields,
        exact_fields=exact_fields,
    )


def cached_pair_payload(
    request: PipelineRequest,
    research: ResearchDoc,
    verified: VerifiedDoc,
    contact: Optional[Contact],
    confidence: float,
    cached_at: datetime,
) -> StagePayload:
    """Research and verify output of a reused pair, keeping its original ``cached_at``."""
    first = research_payload(request, research)
    second = verify_payload(verified, contact, confidence, cached_at, role=request.role)
    return StagePayload(
        research_data={**first.research_data, **second.research_data},
        fields={**first.fields, **second.fields},
        exact_fields=first.exact_fields | second.exact_fields,
    )


def messaging_payload(messages: ComposedMessages, tone: str) -> StagePayload:
    return StagePayload(
        research_data={
            "messages": {"email": messages.email, "linkedin": messages.linkedin},
            "tone": tone,
        },
    )


def history_rows(
    user_id: str,
    request: PipelineRequest,
    messages: ComposedMessages,
    record_id: Optional[str] = None,
) -> List[tuple[str, Dict[str, Any]]]:
    """One email row and one LinkedIn row for a successful compose."""
    base = {
        "user_id": user_id,
        "company_name": request.company,
        "role": request.role,
        "tone": request.tone.value,
        "contact_result_id": record_id,
    }
    return [
        ("email", {**base, "subject_line": messages.subject_line(request.company), "content": messages.email}),
        ("linkedin", {**base, "content": messages.linkedin}),
    ]


# ===== Merger =====

class ResultMerger:
    """Applies stage payloads to the result store with non-destructive merge."""

    def __init__(
        self,
        store: ResultStoreInterface,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def merge_stage(
        self,
        record_id: Optional[str],
        stage: str,
        payload: StagePayload,
        user_id: str,
        company: str,
    ) -> str:
        """
        Merge a stage payload into the record and return the record id.

        With no ``record_id`` the record for (user_id, company) is created or
        reused. Existing research_data keys survive unless the payload has a
        non-empty replacement.

        Raises:
            PersistenceError: If the target record disappeared or the store failed
        """
        if stage not in STAGES:
            raise ValueError(f"Unknown stage: {stage}")

        company_key = normalize_key(company)
        try:
            if record_id is None:
                existing = self.store.find_record(user_id, company_key)
            else:
                existing = self.store.find_record_by_id(record_id)
        except Exception as e:
            raise PersistenceError("read_record", str(e)) from e

        if record_id is not None and existing is None:
            raise PersistenceError("merge_stage", f"record {record_id} not found for {stage}")

        merged_data = merge_research_data((existing or {}).get("research_data"), payload.research_data)
        merged_data["last_step"] = stage
        fields = merge_scalar_fields(existing, payload.fields, exact=payload.exact_fields)
        fields["research_data"] = merged_data

        try:
            if record_id is None:
                fields.update({"user_id": user_id, "company_name": company, "company_key": company_key})
                new_id = self.store.upsert_record(user_id, company_key, fields)
                logger.debug(f"[{stage}] Upserted record {new_id} for {company_key}")
                return new_id

            result = self.store.update_record(record_id, fields)
        except Exception as e:
            raise PersistenceError(f"merge_{stage}", str(e)) from e

        if result.matched_count == 0:
            raise PersistenceError("merge_stage", f"record {record_id} vanished during {stage}")
        logger.debug(f"[{stage}] Merged into record {record_id}")
        return record_id

    def append_history(
        self,
        user_id: str,
        request: PipelineRequest,
        messages: ComposedMessages,
        record_id: Optional[str] = None,
    ) -> List[str]:
        """Append the email and LinkedIn history rows. Returns inserted ids."""
        ids = []
        for kind, row in history_rows(user_id, request, messages, record_id):
            try:
                ids.append(self.store.insert_history(kind, row))
            except Exception as e:
                raise PersistenceError(f"insert_{kind}_history", str(e)) from e
        return ids

    def read_record(self, record_id: Optional[str], user_id: str, company: str) -> Optional[Dict[str, Any]]:
        """Re-read the current record, by id when known."""
        try:
            if record_id is not None:
                return self.store.find_record_by_id(record_id)
            return self.store.find_record(user_id, normalize_key(company))
        except Exception as e:
            raise PersistenceError("read_record", str(e)) from e
