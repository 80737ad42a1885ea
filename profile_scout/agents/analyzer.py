from __future__ import annotations

from profile_scout.agents.planner import fallback_queries
from profile_scout.config import settings
from profile_scout.errors import AnalysisFailure, ExhaustedRetries
from profile_scout.models.events import ActivityKind, ActivityStatus
from profile_scout.models.schemas import Candidate, SufficiencyVerdict
from profile_scout.models.session import SessionState
from profile_scout.services import logger as log_service
from profile_scout.services.activity import ActivityEmitter
from profile_scout.services.invoker import ModelRequest, RetryableInvoker
from profile_scout.services.prompt_store import render_prompt
from profile_scout.tools.web_utils import normalize_text_list

UNABLE_TO_ANALYZE = "Unable to analyze results"


def format_candidates(candidates: list[Candidate]) -> str:
    if not candidates:
        return "(none yet)"
    return "\n\n".join(
        f"Username: @{c.username}\n"
        f"Name: {c.display_name}\n"
        f"Bio: {c.bio}\n"
        f"Followers: {c.follower_count:,}\n"
        f"Category: {c.category}\n"
        f"Verified: {'Yes' if c.verified else 'No'}\n"
        f"Source: {c.source_url}\n"
        "---"
        for c in candidates
    )


class SufficiencyAnalyzer:
    """Judges whether the running candidate set answers the request.

    With ``fail_open`` (the default) an analysis outage ends the search as if
    the results were sufficient. With it disabled, the outage yields the
    deterministic planner queries that have not been tried yet.
    """

    name = "analyze"

    def __init__(
        self,
        invoker: RetryableInvoker,
        emitter: ActivityEmitter,
        *,
        fail_open: bool | None = None,
        max_follow_up_queries: int | None = None,
        platform: str | None = None,
    ):
        self.invoker = invoker
        self.emitter = emitter
        self.fail_open = settings.analysis_fail_open if fail_open is None else fail_open
        self.max_follow_up_queries = max(
            int(max_follow_up_queries or settings.max_follow_up_queries), 1
        )
        self.platform = platform or settings.target_platform

    async def analyze(
        self,
        session: SessionState,
        attempted_queries: list[str],
        iteration: int,
        max_iterations: int,
    ) -> SufficiencyVerdict:
        self.emitter.add(
            ActivityKind.ANALYZE,
            ActivityStatus.PENDING,
            f"Analyzing search results (iteration {iteration}/{max_iterations})",
        )
        request = ModelRequest(
            prompt=render_prompt(
                "analyzer.user",
                platform=self.platform,
                query=session.original_query,
                accounts_text=format_candidates(session.candidates),
                previous_queries=", ".join(attempted_queries),
                iteration=iteration,
                max_iterations=max_iterations,
                accounts_count=len(session.candidates),
            ),
            system=render_prompt(
                "analyzer.system",
                platform=self.platform,
                max_queries=self.max_follow_up_queries,
            ),
            schema=SufficiencyVerdict,
            activity_kind=ActivityKind.ANALYZE,
            caller="analyzer.analyze",
        )
        try:
            verdict: SufficiencyVerdict = await self.invoker.invoke(request)
        except ExhaustedRetries as e:
            return self._degraded_verdict(session, AnalysisFailure(e))

        verdict = SufficiencyVerdict(
            sufficient=verdict.sufficient,
            gaps=normalize_text_list(verdict.gaps, max_items=10),
            follow_up_queries=normalize_text_list(
                verdict.follow_up_queries, max_items=self.max_follow_up_queries
            ),
        )
        self.emitter.add(
            ActivityKind.ANALYZE,
            ActivityStatus.COMPLETE,
            "Analysis complete: "
            + ("Results are sufficient" if verdict.sufficient else "Need more targeted search"),
        )
        return verdict

    def _degraded_verdict(self, session: SessionState, failure: AnalysisFailure) -> SufficiencyVerdict:
        log_service.log_event(
            event_type="analysis_fallback",
            message=failure.describe(),
            session_id=session.session_id,
            fail_open=self.fail_open,
        )
        self.emitter.add(ActivityKind.ANALYZE, ActivityStatus.ERROR, failure.describe())
        if self.fail_open:
            return SufficiencyVerdict(sufficient=True, gaps=[UNABLE_TO_ANALYZE], follow_up_queries=[])

        untried = [
            q
            for q in fallback_queries(session.original_query, self.platform)
            if not session.has_attempted(q)
        ]
        return SufficiencyVerdict(
            sufficient=False,
            gaps=[UNABLE_TO_ANALYZE],
            follow_up_queries=untried[: self.max_follow_up_queries],
        )
