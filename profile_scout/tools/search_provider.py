from __future__ import annotations

from dataclasses import dataclass, field

from profile_scout.config import settings
from profile_scout.tools import brave_search, tavily_search
from profile_scout.tools.tavily_search import SearchResult


@dataclass
class SearchOptions:
    max_results: int = 10
    include_domains: list[str] = field(default_factory=list)
    time_range: str | None = "year"
    max_content_chars: int = 15000

    @classmethod
    def from_settings(cls) -> "SearchOptions":
        return cls(
            max_results=max(int(settings.max_results_per_query), 1),
            include_domains=settings.include_domain_list,
            time_range=settings.search_time_range.strip() or None,
            max_content_chars=max(int(settings.max_content_chars), 1),
        )


@dataclass
class SearchResponse:
    results: list[SearchResult]
    provider: str
    fallback_from: str | None = None
    fallback_reason: str | None = None


async def _tavily(query: str, options: SearchOptions) -> list[SearchResult]:
    return await tavily_search.search(
        query,
        max_results=options.max_results,
        time_range=options.time_range,
        include_domains=options.include_domains,
        max_content_chars=options.max_content_chars,
    )


async def search(query: str, options: SearchOptions | None = None) -> SearchResponse:
    """Search and fetch page content with the configured provider."""
    options = options or SearchOptions.from_settings()
    provider = settings.search_provider.lower().strip()
    use_fallback = settings.search_fallback_to_tavily

    if provider == "tavily":
        return SearchResponse(results=await _tavily(query, options), provider="tavily")

    if provider == "brave":
        try:
            results = await brave_search.search(
                query,
                max_results=options.max_results,
                time_range=options.time_range,
                include_domains=options.include_domains,
                max_content_chars=options.max_content_chars,
            )
            if results or not use_fallback:
                return SearchResponse(results=results, provider="brave")

            return SearchResponse(
                results=await _tavily(query, options),
                provider="tavily",
                fallback_from="brave",
                fallback_reason="brave returned zero results",
            )
        except Exception as e:
            if not use_fallback:
                raise
            return SearchResponse(
                results=await _tavily(query, options),
                provider="tavily",
                fallback_from="brave",
                fallback_reason=str(e),
            )

    raise ValueError(f"Unsupported SEARCH_PROVIDER: {settings.search_provider}")
