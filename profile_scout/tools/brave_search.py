from __future__ import annotations

from typing import Any

import httpx

from profile_scout.config import settings
from profile_scout.tools.tavily_search import SearchResult

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"

FRESHNESS_MAP = {
    "day": "pd",
    "week": "pw",
    "month": "pm",
    "year": "py",
}


def _scoped_query(query: str, include_domains: list[str] | None) -> str:
    if not include_domains:
        return query
    sites = " OR ".join(f"site:{domain}" for domain in include_domains)
    return f"{query} ({sites})"


async def search(
    query: str,
    *,
    max_results: int = 10,
    time_range: str | None = None,
    include_domains: list[str] | None = None,
    max_content_chars: int | None = None,
) -> list[SearchResult]:
    """Execute a Brave web search and normalize results.

    Brave returns snippets rather than page bodies, so ``content`` is the
    description joined with any extra snippets.
    """
    if not settings.brave_api_key:
        raise RuntimeError("BRAVE_API_KEY is not configured")

    params: dict[str, Any] = {
        "q": _scoped_query(query, include_domains),
        "count": min(max_results, 20),
        "extra_snippets": "true",
    }
    if time_range and time_range in FRESHNESS_MAP:
        params["freshness"] = FRESHNESS_MAP[time_range]

    async with httpx.AsyncClient(timeout=30.0) as client:
        response = await client.get(
            BRAVE_SEARCH_URL,
            params=params,
            headers={
                "Accept": "application/json",
                "X-Subscription-Token": settings.brave_api_key,
            },
        )
        response.raise_for_status()
        payload = response.json()

    raw_results = payload.get("web", {}).get("results", [])
    mapped: list[SearchResult] = []
    for item in raw_results:
        snippets = item.get("extra_snippets", []) or []
        description = (item.get("description", "") or "").strip()
        content = " ".join(part for part in [description, *snippets] if part).strip()
        if max_content_chars and len(content) > max_content_chars:
            content = content[:max_content_chars]
        mapped.append(
            SearchResult(
                title=item.get("title", ""),
                url=item.get("url", ""),
                content=content,
            )
        )
    return mapped
