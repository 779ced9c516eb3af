"""
Service wiring for the outreach API.

Everything with a connection or credentials is built once in the app
lifespan and attached to ``app.state.container``. Route handlers reach
it through the dependencies below, so tests can install a container of
fakes without touching module globals.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi import HTTPException, Request
from pymongo import MongoClient

from outreach.common.llm_factory import ProviderConfig
from outreach.pipeline.orchestrator import PipelineOrchestrator
from outreach.pipeline.persistence import ResultMerger
from outreach.pipeline.run_cache import RunCache
from outreach.providers import ComposeProvider, ResearchProvider, VerifyProvider
from outreach.repositories import MongoResultStore, ResultStoreInterface
from outreach.services import HistoryService, RegenerationService, RephraseService, SourceValidator

from .config import RunnerSettings

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Everything route handlers need, built once per app lifetime."""

    store: ResultStoreInterface
    orchestrator: PipelineOrchestrator
    regeneration: RegenerationService
    rephrase: RephraseService
    history: HistoryService
    sources: SourceValidator = field(default_factory=SourceValidator)
    mongo_client: Optional[MongoClient] = None

    def close(self) -> None:
        if self.mongo_client is not None:
            self.mongo_client.close()
            logger.info("MongoDB client closed")
            self.mongo_client = None


def build_services(
    store: ResultStoreInterface,
    research: ResearchProvider,
    verify: VerifyProvider,
    compose: ComposeProvider,
    cache_max_age_hours: Optional[float] = None,
    source_timeout_seconds: Optional[float] = None,
    mongo_client: Optional[MongoClient] = None,
) -> ServiceContainer:
    """Assemble services around an existing store and providers."""
    merger = ResultMerger(store)
    run_cache = RunCache(store, max_age_hours=cache_max_age_hours)
    return ServiceContainer(
        store=store,
        orchestrator=PipelineOrchestrator(research, verify, compose, merger, run_cache),
        regeneration=RegenerationService(compose, merger, run_cache),
        rephrase=RephraseService(compose),
        history=HistoryService(store),
        sources=SourceValidator() if source_timeout_seconds is None else SourceValidator(source_timeout_seconds),
        mongo_client=mongo_client,
    )


def build_container(settings: RunnerSettings) -> ServiceContainer:
    """Create the MongoDB client, store and providers from settings."""
    client = MongoClient(
        settings.mongodb_uri,
        tz_aware=True,
        serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
    )
    store = MongoResultStore.from_client(client, settings.mongo_db_name)
    try:
        store.ensure_indexes()
    except Exception:
        # Startup continues; later store calls fail per request
        logger.warning("Starting without ensured result store indexes")

    timeout = settings.provider_timeout_seconds
    return build_services(
        store=store,
        research=ResearchProvider(ProviderConfig.research(), timeout_seconds=timeout),
        verify=VerifyProvider(ProviderConfig.verify(), timeout_seconds=timeout),
        compose=ComposeProvider(ProviderConfig.compose(), timeout_seconds=timeout),
        cache_max_age_hours=settings.run_cache_max_age_hours,
        source_timeout_seconds=settings.source_check_timeout_seconds,
        mongo_client=client,
    )


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return container
