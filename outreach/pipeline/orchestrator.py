"""
Pipeline orchestrator: research -> verify -> compose.

Runs one request through the three capability providers, reusing a fresh
cached research/verify pair when one exists, and yields lifecycle events
as it goes. Compose always runs, including on a cache hit.

Stage failures end the run with a single error event. Persistence failures
never do: they are recorded in the run's ErrorCollector and logged, and the
stage result keeps flowing.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Dict, Optional, Type

from outreach.common.error_handling import ErrorCollector, persist_best_effort
from outreach.common.errors import (
    MessagingFailed,
    PipelineStageError,
    ResearchFailed,
    VerificationFailed,
)
from outreach.common.logger import PipelineLogger, get_logger
from outreach.pipeline.contacts import resolve_contact
from outreach.pipeline.events import PipelineEvent, RunProgress
from outreach.pipeline.persistence import (
    ResultMerger,
    cached_pair_payload,
    messaging_payload,
    research_payload,
    verify_payload,
)
from outreach.pipeline.run_cache import CachedPair, RunCache
from outreach.pipeline.scoring import calculate_confidence
from outreach.pipeline.states import PipelineState, RunStateMachine, StageStatus
from outreach.pipeline.types import (
    ComposedMessages,
    Contact,
    PipelineRequest,
    ResearchDoc,
    VerifiedDoc,
)
from outreach.providers.compose import ComposeProvider
from outreach.providers.research import ResearchProvider
from outreach.providers.verify import VerifyProvider
from outreach.services.operation_base import OperationTimer


def create_run_id() -> str:
    return f"run_{uuid.uuid4().hex[:12]}"


@dataclass
class PipelineRun:
    """Mutable bookkeeping for one run."""

    request: PipelineRequest
    user_id: str
    run_id: str = field(default_factory=create_run_id)
    machine: RunStateMachine = field(default_factory=RunStateMachine)
    progress: RunProgress = field(default_factory=RunProgress)
    errors: ErrorCollector = field(init=False)
    log: PipelineLogger = field(init=False)
    record_id: Optional[str] = None
    from_cache: bool = False

    def __post_init__(self):
        self.errors = ErrorCollector(run_id=self.run_id)
        self.log = get_logger(__name__, run_id=self.run_id)

    @property
    def state(self) -> PipelineState:
        return self.machine.state


class PipelineOrchestrator:
    """Sequences the capability providers and persists each stage."""

    def __init__(
        self,
        research_provider: ResearchProvider,
        verify_provider: VerifyProvider,
        compose_provider: ComposeProvider,
        merger: ResultMerger,
        run_cache: RunCache,
    ):
        self.research_provider = research_provider
        self.verify_provider = verify_provider
        self.compose_provider = compose_provider
        self.merger = merger
        self.run_cache = run_cache

    async def run(
        self,
        request: PipelineRequest,
        user_id: str,
        run: Optional[PipelineRun] = None,
    ) -> AsyncIterator[PipelineEvent]:
        """
        Execute the pipeline and yield its events.

        Exactly one terminal event (final or error) is yielded last. Closing
        the generator early stops further work; writes already made stay.

        Args:
            request: Validated pipeline input
            user_id: Owner of the persisted record and history rows
            run: Optional pre-built run bookkeeping (lets callers read the
                 run id, state and error collector)
        """
        run = run or PipelineRun(request=request, user_id=user_id)
        progress = run.progress
        timer = OperationTimer()
        run.log.info(f"Starting pipeline for {request.company} / {request.role}")

        try:
            cached = await self._check_cache(run)

            if cached is not None:
                research, verified = cached.research, cached.verified
                run.from_cache = True
                run.machine.advance(PipelineState.VERIFY_DONE)
                contact = resolve_contact(verified.contact)
                confidence = calculate_confidence(verified, contact)
                yield progress.status_event(research=StageStatus.FROM_CACHE, verify=StageStatus.FROM_CACHE)
                yield progress.intermediate_event(
                    research=research.summary,
                    verified=verified.summary,
                    verified_points=_dump_points(verified),
                )
                # The pair may come from another user's record; copy it into this user's
                run.record_id = await persist_best_effort(
                    run.errors, "verify", "merge_stage",
                    self.merger.merge_stage,
                    None, "verify",
                    cached_pair_payload(request, research, verified, contact, confidence, cached.cached_at),
                    user_id, request.company,
                )
                read_id = run.record_id or cached.record_id
            else:
                run.machine.advance(PipelineState.RESEARCHING)
                yield progress.status_event(research=StageStatus.RUNNING)
                research = await self._call_stage(
                    run,
                    ResearchFailed,
                    self.research_provider.research(request.company, request.role, request.domain),
                )
                run.machine.advance(PipelineState.RESEARCH_DONE)
                run.record_id = await persist_best_effort(
                    run.errors, "research", "merge_stage",
                    self.merger.merge_stage,
                    None, "research", research_payload(request, research), user_id, request.company,
                )
                yield progress.status_event(research=StageStatus.COMPLETE)
                yield progress.intermediate_event(research=research.summary)

                run.machine.advance(PipelineState.VERIFYING)
                yield progress.status_event(verify=StageStatus.RUNNING)
                verified = await self._call_stage(
                    run, VerificationFailed, self.verify_provider.verify(research)
                )
                run.machine.advance(PipelineState.VERIFY_DONE)

                contact = resolve_contact(verified.contact)
                confidence = calculate_confidence(verified, contact)
                run.record_id = await persist_best_effort(
                    run.errors, "verify", "merge_stage",
                    self.merger.merge_stage,
                    run.record_id, "verify",
                    verify_payload(verified, contact, confidence, self.merger.now(), role=request.role),
                    user_id, request.company,
                    fallback=run.record_id,
                )
                yield progress.status_event(verify=StageStatus.COMPLETE)
                yield progress.intermediate_event(
                    verified=verified.summary,
                    verified_points=_dump_points(verified),
                )
                read_id = run.record_id

            run.machine.advance(PipelineState.COMPOSING)
            compose_from = await self._reread_verified(run, read_id) or verified
            yield progress.status_event(messaging=StageStatus.RUNNING)
            messages: ComposedMessages = await self._call_stage(
                run,
                MessagingFailed,
                self.compose_provider.compose(
                    compose_from,
                    company=request.company,
                    role=request.role,
                    highlights=request.highlights,
                    tone=request.tone,
                    contact=contact,
                    resume_context=request.resume_context,
                ),
            )

            # On a cache hit the cached record may belong to another user,
            # so messages always merge into this user's own record.
            run.record_id = await persist_best_effort(
                run.errors, "messaging", "merge_stage",
                self.merger.merge_stage,
                run.record_id, "messaging", messaging_payload(messages, request.tone.value),
                user_id, request.company,
                fallback=run.record_id,
            )
            await persist_best_effort(
                run.errors, "messaging", "append_history",
                self.merger.append_history,
                user_id, request, messages, run.record_id,
                fallback=[],
            )
            yield progress.status_event(messaging=StageStatus.COMPLETE)

            run.machine.advance(PipelineState.DONE)
            timer.stop()
            run.log.info(
                f"Pipeline complete in {timer.duration_ms}ms "
                f"(from_cache={run.from_cache}, persistence_errors={len(run.errors.errors)})"
            )
            yield progress.final_event(
                self._final_payload(run, research, verified, messages, contact, confidence, timer.duration_ms)
            )

        except PipelineStageError as e:
            run.machine.advance(PipelineState.FAILED)
            run.log.error(f"{e.tag}: {e}")
            yield progress.error_event(str(e), e.tag, e.stage)

    async def _check_cache(self, run: PipelineRun) -> Optional[CachedPair]:
        request = run.request
        cached = await persist_best_effort(
            run.errors, "cache", "lookup",
            self.run_cache.lookup, request.company, request.role,
        )
        run.machine.advance(PipelineState.CACHE_CHECKED)
        return cached

    async def _call_stage(
        self,
        run: PipelineRun,
        error_cls: Type[PipelineStageError],
        call: Awaitable[Any],
    ) -> Any:
        log = run.log.bind(error_cls.stage)
        log.info("Started")
        try:
            result = await call
        except Exception as e:
            raise error_cls(f"{error_cls.stage} failed: {e}", cause=e) from e
        log.info("Completed")
        return result

    async def _reread_verified(self, run: PipelineRun, record_id: Optional[str]) -> Optional[VerifiedDoc]:
        """Load the verified document from the persisted record, if readable."""
        if record_id is None:
            return None
        record = await persist_best_effort(
            run.errors, "messaging", "read_record",
            self.merger.read_record, record_id, run.user_id, run.request.company,
        )
        raw = ((record or {}).get("research_data") or {}).get("verified")
        if not raw:
            return None
        try:
            return VerifiedDoc.model_validate(raw)
        except ValueError as e:
            run.errors.add_error("messaging", "read_record", f"stored verified document unreadable: {e}")
            return None

    def _final_payload(
        self,
        run: PipelineRun,
        research: ResearchDoc,
        verified: VerifiedDoc,
        messages: ComposedMessages,
        contact: Optional[Contact],
        confidence: float,
        duration_ms: int,
    ) -> Dict[str, Any]:
        return {
            "research": research.summary,
            "verified": verified.summary,
            "outputs": {"email": messages.email, "linkedin": messages.linkedin},
            "verified_points": _dump_points(verified),
            "contact": contact.model_dump(mode="json") if contact else None,
            "confidence_score": confidence,
            "from_cache": run.from_cache,
            "contact_result_id": run.record_id,
            "run_id": run.run_id,
            "duration_ms": duration_ms,
        }


def _dump_points(doc: VerifiedDoc) -> list:
    return [p.model_dump(mode="json") for p in doc.points]
