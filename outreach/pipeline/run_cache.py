"""
Run cache over persisted results.

A prior run for the same company and role is reused when its record holds
both a research and a verified document and was cached less than
``max_age_hours`` ago. There is no separate cache collection: the verify
stage stamps ``cached_at`` on the result record, which is what this reads.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pydantic import ValidationError

from outreach.common.config import Config
from outreach.pipeline.types import ResearchDoc, VerifiedDoc
from outreach.repositories.base import ResultStoreInterface, normalize_key, record_timestamp

logger = logging.getLogger(__name__)


@dataclass
class CachedPair:
    research: ResearchDoc
    verified: VerifiedDoc
    cached_at: datetime
    record_id: Optional[str] = None


def _as_utc(value: datetime) -> datetime:
    # Mongo returns naive datetimes unless the client is tz_aware
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RunCache:
    """Keyed (company, role) lookup of fresh Research+Verify results."""

    def __init__(
        self,
        store: ResultStoreInterface,
        max_age_hours: Optional[float] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self.max_age_hours = Config.RUN_CACHE_MAX_AGE_HOURS if max_age_hours is None else max_age_hours
        self._clock = clock

    def lookup(
        self,
        company: str,
        role: str,
        max_age_hours: Optional[float] = None,
    ) -> Optional[CachedPair]:
        """
        Return the cached research/verified pair, or None on a miss.

        A record aged exactly ``max_age_hours`` or more is a miss. Store
        errors are logged and treated as a miss.
        """
        max_age = self.max_age_hours if max_age_hours is None else max_age_hours
        company_key = normalize_key(company)
        role_key = normalize_key(role)

        try:
            record = self.store.find_recent_for_cache(company_key, role_key)
        except Exception as e:
            logger.warning(f"Cache lookup failed for {company_key}/{role_key}, treating as miss: {e}")
            return None

        if not record:
            logger.info(f"Cache MISS for {company_key}/{role_key}")
            return None

        cached_at = record_timestamp(record, "cached_at")
        if cached_at is None:
            logger.info(f"Cache MISS for {company_key}/{role_key} (no cached_at)")
            return None

        age = self._clock() - _as_utc(cached_at)
        if age >= timedelta(hours=max_age):
            logger.info(f"Cache EXPIRED for {company_key}/{role_key} (age={age})")
            return None

        data = record.get("research_data") or {}
        try:
            research = ResearchDoc.model_validate(data.get("research"))
            verified = VerifiedDoc.model_validate(data.get("verified"))
        except ValidationError as e:
            logger.warning(f"Cached documents for {company_key}/{role_key} are unreadable: {e}")
            return None

        logger.info(f"Cache HIT for {company_key}/{role_key} (age={age})")
        return CachedPair(
            research=research,
            verified=verified,
            cached_at=_as_utc(cached_at),
            record_id=record.get("id"),
        )
