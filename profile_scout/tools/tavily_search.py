from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tavily import AsyncTavilyClient

from profile_scout.config import settings


@dataclass
class SearchResult:
    title: str
    url: str
    content: str


async def search(
    query: str,
    *,
    max_results: int = 10,
    time_range: str | None = None,
    include_domains: list[str] | None = None,
    max_content_chars: int | None = None,
) -> list[SearchResult]:
    """Search with Tavily and return each hit with its fetched page text."""
    if not settings.tavily_api_key:
        raise RuntimeError("TAVILY_API_KEY is not configured")
    client = AsyncTavilyClient(api_key=settings.tavily_api_key)

    kwargs: dict[str, Any] = {
        "query": query,
        "search_depth": "advanced",
        "max_results": max_results,
        "topic": "general",
        "include_raw_content": True,
    }
    if time_range:
        kwargs["time_range"] = time_range
    if include_domains:
        kwargs["include_domains"] = include_domains

    response = await client.search(**kwargs)

    results: list[SearchResult] = []
    for r in response.get("results", []):
        # raw_content is the fetched page; content is Tavily's snippet.
        content = r.get("raw_content") or r.get("content") or ""
        if max_content_chars and len(content) > max_content_chars:
            content = content[:max_content_chars]
        results.append(
            SearchResult(
                title=r.get("title") or "",
                url=r.get("url") or "",
                content=content,
            )
        )
    return results
