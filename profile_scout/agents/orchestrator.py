from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import Any, AsyncGenerator, Awaitable, Callable

from profile_scout.agents.analyzer import SufficiencyAnalyzer
from profile_scout.agents.extractor import Extractor
from profile_scout.agents.planner import QueryPlanner
from profile_scout.agents.searcher import Searcher
from profile_scout.config import settings
from profile_scout.llm_client import ModelProvider, get_provider
from profile_scout.models.events import SSEEvent
from profile_scout.models.schemas import Candidate
from profile_scout.models.session import FetchedPage, SessionState
from profile_scout.services import logger as log_service
from profile_scout.services.activity import ActivityEmitter, EventChannel
from profile_scout.services.aggregator import dedupe_pages, merge
from profile_scout.services.invoker import RetryableInvoker
from profile_scout.tools.search_provider import SearchOptions

ResultSink = Callable[[SessionState], Awaitable[None]]


class DiscoveryStage(str, Enum):
    PLANNING = "planning"
    SEARCHING = "searching"
    EXTRACTING = "extracting"
    AGGREGATING = "aggregating"
    ANALYZING = "analyzing"
    COMPLETE = "complete"


class DiscoveryOrchestrator:
    """Runs the profile discovery loop for one query.

    Flow:
      1. Plan 2-3 search queries
      2. Fan out: search every query in parallel
      3. Fan out: extract candidates from every fetched page in parallel
      4. Merge into the session, streaming partial results when new ones appear
      5. Ask whether the set is sufficient; loop on untried follow-ups
      6. Emit the final results event

    Every stage degrades instead of raising, so a run always ends with exactly
    one ``results`` event.
    """

    def __init__(
        self,
        provider: ModelProvider | None = None,
        *,
        max_iterations: int | None = None,
        search_options: SearchOptions | None = None,
        result_sink: ResultSink | None = None,
    ):
        self.provider = provider or get_provider()
        self.max_iterations = max(int(max_iterations or settings.max_iterations), 1)
        self.max_parallel_search = max(int(settings.max_parallel_search), 1)
        self.max_parallel_extract = max(int(settings.max_parallel_extract), 1)
        self.search_options = search_options
        self.result_sink = result_sink

    def discover(self, query: str) -> AsyncGenerator[SSEEvent, None]:
        """Validate the query and return the session's ordered event stream.

        Closing the stream early cancels all in-flight work for the session.
        """
        cleaned = query.strip() if isinstance(query, str) else ""
        if not cleaned:
            raise ValueError("Query is required and must be a non-empty string")
        return self._stream(SessionState(original_query=cleaned))

    async def _stream(self, session: SessionState) -> AsyncGenerator[SSEEvent, None]:
        channel = EventChannel()
        task = asyncio.create_task(self._run_and_close(session, channel))
        try:
            async for event in channel:
                yield event
            await task
        finally:
            if not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
                log_service.log_event(
                    event_type="discovery_cancelled",
                    message="Consumer went away; discovery cancelled",
                    session_id=session.session_id,
                )

    async def _run_and_close(self, session: SessionState, channel: EventChannel) -> None:
        try:
            await self.run(session, ActivityEmitter(session, channel))
        finally:
            channel.close()

    async def run(self, session: SessionState, emitter: ActivityEmitter) -> SessionState:
        """Drive the state machine to completion, writing events through ``emitter``."""
        started = time.monotonic()
        invoker = RetryableInvoker(self.provider, session, emitter)
        planner = QueryPlanner(invoker, emitter)
        searcher = Searcher(session, emitter, self.search_options)
        extractor = Extractor(invoker, emitter)
        analyzer = SufficiencyAnalyzer(invoker, emitter)

        self._enter(session, DiscoveryStage.PLANNING)
        queries = await planner.plan(session.original_query)

        while queries and session.iteration < self.max_iterations:
            session.iteration += 1
            self._enter(session, DiscoveryStage.SEARCHING, queries=queries)
            session.attempted_queries.extend(queries)
            pages = await self._search_all(session, searcher, queries)
            if not pages:
                break

            self._enter(session, DiscoveryStage.EXTRACTING, pages=len(pages))
            extracted = await self._extract_all(session, extractor, pages)

            self._enter(session, DiscoveryStage.AGGREGATING, extracted=len(extracted))
            merged = merge(session.candidates, extracted)
            session.candidates = merged.merged
            if merged.newly_added:
                emitter.partial_results(len(merged.newly_added))

            self._enter(session, DiscoveryStage.ANALYZING, total=len(session.candidates))
            verdict = await analyzer.analyze(
                session,
                list(session.attempted_queries),
                session.iteration,
                self.max_iterations,
            )
            if verdict.sufficient:
                break
            queries = [q for q in verdict.follow_up_queries if not session.has_attempted(q)]

        self._enter(
            session,
            DiscoveryStage.COMPLETE,
            iterations=session.iteration,
            candidates=len(session.candidates),
            tokens_used=session.tokens_used,
            runtime_ms=int((time.monotonic() - started) * 1000),
        )
        emitter.results()
        await self._deliver(session)
        return session

    async def _search_all(
        self, session: SessionState, searcher: Searcher, queries: list[str]
    ) -> list[FetchedPage]:
        semaphore = asyncio.Semaphore(self.max_parallel_search)

        async def run_one(query: str) -> list[FetchedPage]:
            async with semaphore:
                return await searcher.search(query)

        outcomes = await asyncio.gather(
            *(run_one(query) for query in queries), return_exceptions=True
        )
        pages: list[FetchedPage] = self._settle(session, "search", queries, outcomes)
        return dedupe_pages(pages)

    async def _extract_all(
        self, session: SessionState, extractor: Extractor, pages: list[FetchedPage]
    ) -> list[Candidate]:
        semaphore = asyncio.Semaphore(self.max_parallel_extract)
        for page in pages:
            session.processed_identifiers.add(page.url)

        async def run_one(page: FetchedPage) -> list[Candidate]:
            async with semaphore:
                return await extractor.extract(page, session.original_query)

        outcomes = await asyncio.gather(*(run_one(page) for page in pages), return_exceptions=True)
        return self._settle(session, "extract", [p.url for p in pages], outcomes)

    @staticmethod
    def _settle(
        session: SessionState,
        stage: str,
        labels: list[str],
        outcomes: list[Any],
    ) -> list[Any]:
        """Flatten successful worker results; log the ones that raised."""
        collected: list[Any] = []
        failed = 0
        for label, outcome in zip(labels, outcomes):
            if isinstance(outcome, Exception):
                failed += 1
                log_service.log_event(
                    event_type=f"{stage}_worker_failed",
                    message=f"{stage} worker for {label} raised",
                    session_id=session.session_id,
                    error=str(outcome) or type(outcome).__name__,
                )
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            collected.extend(outcome)
        if failed:
            log_service.log_discovery_step(
                session.session_id,
                stage,
                "partial",
                {"failed": failed, "succeeded": len(outcomes) - failed},
            )
        return collected

    async def _deliver(self, session: SessionState) -> None:
        if self.result_sink is None:
            return
        try:
            await self.result_sink(session)
        except Exception as e:
            log_service.log_event(
                event_type="result_sink_failed",
                message="Failed to hand results to the result sink",
                session_id=session.session_id,
                error=str(e),
            )

    @staticmethod
    def _enter(session: SessionState, stage: DiscoveryStage, **data: Any) -> None:
        log_service.log_discovery_step(
            session.session_id,
            stage.value,
            "entered",
            {"iteration": session.iteration, **data},
        )
