from __future__ import annotations

from profile_scout.errors import QueryFailure
from profile_scout.models.events import ActivityKind, ActivityStatus
from profile_scout.models.session import FetchedPage, SessionState
from profile_scout.services import logger as log_service
from profile_scout.services.activity import ActivityEmitter
from profile_scout.tools import search_provider, web_utils
from profile_scout.tools.search_provider import SearchOptions


class Searcher:
    """Runs one query against the search-and-fetch capability.

    A failing query yields no pages; it never aborts the iteration.
    """

    name = "search"

    def __init__(
        self,
        session: SessionState,
        emitter: ActivityEmitter,
        options: SearchOptions | None = None,
    ):
        self.session = session
        self.emitter = emitter
        self.options = options or SearchOptions.from_settings()

    async def search(self, query: str) -> list[FetchedPage]:
        self.emitter.add(ActivityKind.SEARCH, ActivityStatus.PENDING, f"Searching for: {query}")

        try:
            response = await search_provider.search(query, self.options)
        except Exception as e:
            failure = QueryFailure(e, subject=query)
            log_service.log_event(
                event_type="search_failed",
                message=failure.describe(),
                session_id=self.session.session_id,
                error=str(e),
            )
            self.emitter.add(ActivityKind.SEARCH, ActivityStatus.ERROR, failure.describe())
            return []

        pages = [
            FetchedPage(
                title=r.title.strip(),
                url=r.url,
                content=r.content[: self.options.max_content_chars],
            )
            for r in response.results
            if r.title and r.title.strip() and r.content and r.content.strip()
            and web_utils.is_valid_url(r.url)
        ]

        self.session.record_step()
        if response.fallback_from:
            log_service.log_event(
                event_type="search_fallback",
                message=f"Search fell back from {response.fallback_from} to {response.provider}",
                session_id=self.session.session_id,
                reason=response.fallback_reason,
            )
        self.emitter.add(
            ActivityKind.SEARCH,
            ActivityStatus.COMPLETE,
            f'Found {len(pages)} results for "{query}"',
        )
        return pages
