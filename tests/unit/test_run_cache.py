"""
Unit tests for outreach/pipeline/run_cache.py

Checks hit/miss/expiry decisions and the exact max-age boundary.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from outreach.pipeline.run_cache import RunCache
from tests.helpers.fakes import FIXED_NOW, InMemoryResultStore


def _seed(store, acme_research, acme_verified, cached_at, company="Acme", role="CTO", user_id="user-1"):
    store.upsert_record(
        user_id,
        company.lower(),
        {
            "company_name": company,
            "role": role,
            "role_key": role.lower(),
            "cached_at": cached_at,
            "research_data": {
                "research": acme_research.model_dump(mode="json"),
                "verified": acme_verified.model_dump(mode="json"),
            },
        },
    )


class TestRunCacheLookup:
    """Tests for RunCache.lookup."""

    def test_fresh_record_is_hit(self, store, run_cache, acme_research, acme_verified):
        _seed(store, acme_research, acme_verified, FIXED_NOW - timedelta(hours=1))
        cached = run_cache.lookup("Acme", "CTO")
        assert cached is not None
        assert cached.research.summary == acme_research.summary
        assert cached.verified.summary == acme_verified.summary
        assert cached.record_id is not None

    def test_lookup_normalizes_keys(self, store, run_cache, acme_research, acme_verified):
        """Should match regardless of case and surrounding whitespace."""
        _seed(store, acme_research, acme_verified, FIXED_NOW - timedelta(hours=1))
        assert run_cache.lookup("  ACME ", " cto") is not None

    def test_cache_is_shared_across_users(self, store, run_cache, acme_research, acme_verified):
        _seed(store, acme_research, acme_verified, FIXED_NOW - timedelta(hours=1), user_id="someone-else")
        assert run_cache.lookup("Acme", "CTO") is not None

    def test_exactly_max_age_is_miss(self, store, run_cache, acme_research, acme_verified):
        """Should treat a record aged exactly max_age as expired."""
        _seed(store, acme_research, acme_verified, FIXED_NOW - timedelta(hours=168))
        assert run_cache.lookup("Acme", "CTO") is None

    def test_just_under_max_age_is_hit(self, store, run_cache, acme_research, acme_verified):
        _seed(store, acme_research, acme_verified, FIXED_NOW - timedelta(hours=168) + timedelta(seconds=1))
        assert run_cache.lookup("Acme", "CTO") is not None

    def test_per_call_max_age_override(self, store, run_cache, acme_research, acme_verified):
        _seed(store, acme_research, acme_verified, FIXED_NOW - timedelta(hours=3))
        assert run_cache.lookup("Acme", "CTO", max_age_hours=2) is None
        assert run_cache.lookup("Acme", "CTO", max_age_hours=4) is not None

    def test_different_role_is_miss(self, store, run_cache, acme_research, acme_verified):
        _seed(store, acme_research, acme_verified, FIXED_NOW - timedelta(hours=1))
        assert run_cache.lookup("Acme", "VP Engineering") is None

    def test_record_without_verified_is_miss(self, store, run_cache, acme_research):
        """Should not hit on a record that only finished research."""
        store.upsert_record(
            "user-1", "acme",
            {"role_key": "cto", "cached_at": FIXED_NOW, "research_data": {"research": acme_research.model_dump()}},
        )
        assert run_cache.lookup("Acme", "CTO") is None

    def test_naive_timestamp_treated_as_utc(self, store, run_cache, acme_research, acme_verified):
        _seed(store, acme_research, acme_verified, (FIXED_NOW - timedelta(hours=1)).replace(tzinfo=None))
        cached = run_cache.lookup("Acme", "CTO")
        assert cached is not None
        assert cached.cached_at.tzinfo is not None

    def test_store_failure_is_miss(self):
        """Should log and miss when the store raises."""
        cache = RunCache(InMemoryResultStore(fail_on={"find_recent_for_cache"}), max_age_hours=168)
        assert cache.lookup("Acme", "CTO") is None

    def test_unreadable_documents_are_miss(self, run_cache):
        store = MagicMock()
        store.find_recent_for_cache.return_value = {
            "id": "rec-1",
            "cached_at": FIXED_NOW,
            "research_data": {"research": {"points": "not a list"}, "verified": {}},
        }
        cache = RunCache(store, max_age_hours=168, clock=lambda: FIXED_NOW)
        assert cache.lookup("Acme", "CTO") is None

    def test_default_max_age_from_config(self, store):
        assert RunCache(store).max_age_hours == 168

    @pytest.mark.parametrize("hours", [0, 1, 100, 167])
    def test_ages_inside_window_hit(self, store, run_cache, acme_research, acme_verified, hours):
        _seed(store, acme_research, acme_verified, FIXED_NOW - timedelta(hours=hours))
        assert run_cache.lookup("Acme", "CTO") is not None
