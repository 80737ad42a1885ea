from __future__ import annotations

from dataclasses import dataclass, field

from profile_scout.models.schemas import Candidate, normalize_username
from profile_scout.models.session import FetchedPage


@dataclass(slots=True)
class MergeResult:
    merged: list[Candidate] = field(default_factory=list)
    newly_added: list[Candidate] = field(default_factory=list)


def username_key(candidate: Candidate) -> str:
    return normalize_username(candidate.username).lower()


def merge(existing: list[Candidate], newly_extracted: list[Candidate]) -> MergeResult:
    """Append unseen usernames in encounter order; the first occurrence wins."""
    merged = list(existing)
    seen: set[str] = {username_key(c) for c in existing}
    newly_added: list[Candidate] = []
    for candidate in newly_extracted:
        key = username_key(candidate)
        if not key or key in seen:
            continue
        seen.add(key)
        merged.append(candidate)
        newly_added.append(candidate)
    return MergeResult(merged=merged, newly_added=newly_added)


def dedupe_pages(pages: list[FetchedPage]) -> list[FetchedPage]:
    """Drop pages whose URL already appeared earlier in the batch."""
    seen_urls: set[str] = set()
    unique: list[FetchedPage] = []
    for page in pages:
        key = page.url.strip().lower()
        if key and key in seen_urls:
            continue
        if key:
            seen_urls.add(key)
        unique.append(page)
    return unique
