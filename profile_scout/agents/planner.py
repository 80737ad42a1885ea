from __future__ import annotations

from datetime import date

from profile_scout.config import settings
from profile_scout.errors import ExhaustedRetries, PlanningFailure
from profile_scout.models.events import ActivityKind, ActivityStatus
from profile_scout.models.schemas import SearchPlan
from profile_scout.services import logger as log_service
from profile_scout.services.activity import ActivityEmitter
from profile_scout.services.invoker import ModelRequest, RetryableInvoker
from profile_scout.services.prompt_store import render_prompt
from profile_scout.tools.web_utils import normalize_text_list


def fallback_queries(original_query: str, platform: str) -> list[str]:
    """Deterministic queries used when planning is unavailable."""
    query = " ".join(original_query.split())
    return [
        f"{query} {platform} accounts",
        f"{query} influencers",
        f"{query} {platform} users",
    ]


class QueryPlanner:
    """Turns the user's description into a small, diversified set of queries."""

    name = "planner"

    def __init__(
        self,
        invoker: RetryableInvoker,
        emitter: ActivityEmitter,
        *,
        max_queries: int | None = None,
        platform: str | None = None,
    ):
        self.invoker = invoker
        self.emitter = emitter
        self.max_queries = max(int(max_queries or settings.max_planned_queries), 1)
        self.platform = platform or settings.target_platform

    async def plan(self, original_query: str) -> list[str]:
        self.emitter.add(
            ActivityKind.PLANNING,
            ActivityStatus.PENDING,
            f"Planning {self.platform} search strategy",
        )
        request = ModelRequest(
            prompt=render_prompt("planner.user", platform=self.platform, query=original_query),
            system=render_prompt(
                "planner.system",
                platform=self.platform,
                year=date.today().year,
                max_queries=self.max_queries,
            ),
            schema=SearchPlan,
            activity_kind=ActivityKind.PLANNING,
            caller="planner.plan",
        )
        try:
            plan: SearchPlan = await self.invoker.invoke(request)
        except ExhaustedRetries as e:
            failure = PlanningFailure(e)
            log_service.log_event(
                event_type="planning_fallback",
                message=failure.describe(),
                session_id=self.invoker.session.session_id,
            )
            self.emitter.add(ActivityKind.PLANNING, ActivityStatus.ERROR, failure.describe())
            return fallback_queries(original_query, self.platform)[: self.max_queries]

        queries = normalize_text_list(plan.search_queries, max_items=self.max_queries)
        self.emitter.add(
            ActivityKind.PLANNING,
            ActivityStatus.COMPLETE,
            f"Created search strategy with {len(queries)} queries",
        )
        return queries
