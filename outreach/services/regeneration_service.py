"""
Message regeneration and LinkedIn rephrase.

Regeneration re-runs only the compose stage against what is already
persisted: the user's own record for the company, or a fresh cached
verify result from any run when the user has none. Research and verify
are never invoked here. Every successful compose appends one email and
one LinkedIn history row, so two identical regenerations produce four
rows.
"""

import logging
from typing import Any, Dict, Optional

from outreach.common.error_handling import ErrorCollector, persist_best_effort
from outreach.common.errors import ProviderError
from outreach.pipeline.contacts import resolve_contact, resolve_contact_from_data
from outreach.pipeline.persistence import ResultMerger, messaging_payload
from outreach.pipeline.run_cache import RunCache
from outreach.pipeline.types import PipelineRequest, VerifiedDoc
from outreach.providers.compose import ComposeProvider
from outreach.services.operation_base import OperationResult, OperationService

logger = logging.getLogger(__name__)


class RegenerationService(OperationService):
    """Compose-only regeneration of outreach messages."""

    operation_name = "regenerate-messages"

    def __init__(
        self,
        compose_provider: ComposeProvider,
        merger: ResultMerger,
        run_cache: Optional[RunCache] = None,
    ):
        self.compose_provider = compose_provider
        self.merger = merger
        self.run_cache = run_cache

    async def execute(self, request: PipelineRequest, user_id: str) -> OperationResult:
        """
        Regenerate email and LinkedIn messages for a company.

        Returns:
            OperationResult with data {"email", "linkedin", "contact_result_id"}
            on success, or error set when compose failed
        """
        run_id = self.create_run_id()
        errors = ErrorCollector(run_id=run_id)
        messages = None
        record_id = None
        error = None

        with self.timed_execution() as timer:
            record = await persist_best_effort(
                errors, "messaging", "read_record",
                self.merger.read_record, None, user_id, request.company,
            )
            verified = await self._load_verified(record, request, errors)
            research_data = (record or {}).get("research_data")
            contact = resolve_contact(verified.contact) or resolve_contact_from_data(research_data)

            try:
                messages = await self.compose_provider.compose(
                    verified,
                    company=request.company,
                    role=request.role,
                    highlights=request.highlights,
                    tone=request.tone,
                    contact=contact,
                    resume_context=request.resume_context,
                )
            except ProviderError as e:
                logger.error(f"[{run_id}] Regeneration failed for {request.company}: {e}")
                error = str(e)

            if messages is not None:
                record_id = await persist_best_effort(
                    errors, "messaging", "merge_stage",
                    self.merger.merge_stage,
                    (record or {}).get("id"), "messaging",
                    messaging_payload(messages, request.tone.value),
                    user_id, request.company,
                    fallback=(record or {}).get("id"),
                )
                await persist_best_effort(
                    errors, "messaging", "append_history",
                    self.merger.append_history,
                    user_id, request, messages, record_id,
                    fallback=[],
                )

        if messages is None:
            return self.create_error_result(run_id, error, timer.duration_ms)

        logger.info(f"[{run_id}] Regenerated messages for {request.company} in {timer.duration_ms}ms")
        data: Dict[str, Any] = {
            "email": messages.email or None,
            "linkedin": messages.linkedin or None,
            "contact_result_id": record_id,
        }
        return self.create_success_result(run_id, data, timer.duration_ms, warnings=errors.get_error_messages())

    async def _load_verified(
        self,
        record: Optional[Dict[str, Any]],
        request: PipelineRequest,
        errors: ErrorCollector,
    ) -> VerifiedDoc:
        raw = ((record or {}).get("research_data") or {}).get("verified")
        if raw:
            try:
                return VerifiedDoc.model_validate(raw)
            except ValueError as e:
                errors.add_error("messaging", "read_record", f"stored verified document unreadable: {e}")

        if self.run_cache is not None:
            cached = await persist_best_effort(
                errors, "cache", "lookup",
                self.run_cache.lookup, request.company, request.role,
            )
            if cached is not None:
                return cached.verified

        logger.info(f"No verified research for {request.company}, composing from highlights only")
        return VerifiedDoc()


class RephraseService(OperationService):
    """Shortens a LinkedIn message to 22 words."""

    operation_name = "rephrase-linkedin"

    def __init__(self, compose_provider: ComposeProvider):
        self.compose_provider = compose_provider

    async def execute(self, linkedin: str) -> OperationResult:
        run_id = self.create_run_id()
        rephrased = None
        error = None
        with self.timed_execution() as timer:
            try:
                rephrased = await self.compose_provider.rephrase_linkedin(linkedin)
            except ProviderError as e:
                logger.error(f"[{run_id}] Rephrase failed: {e}")
                error = str(e)

        if rephrased is None:
            return self.create_error_result(run_id, error, timer.duration_ms)
        return self.create_success_result(run_id, {"linkedin": rephrased}, timer.duration_ms)
