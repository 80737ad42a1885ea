"""Tests for candidate merging and page dedupe."""
from __future__ import annotations

from profile_scout.models.schemas import Candidate
from profile_scout.models.session import FetchedPage
from profile_scout.services.aggregator import dedupe_pages, merge, username_key


def candidate(username: str, source: str = "https://instagram.com/x") -> Candidate:
    return Candidate(username=username, display_name=username.title(), source_url=source)


def usernames(candidates: list[Candidate]) -> list[str]:
    return [c.username for c in candidates]


def test_merge_appends_new_candidates_in_order():
    result = merge([candidate("alice")], [candidate("bob"), candidate("carol")])

    assert usernames(result.merged) == ["alice", "bob", "carol"]
    assert usernames(result.newly_added) == ["bob", "carol"]


def test_merge_excludes_duplicate_of_existing_candidate():
    existing = [candidate("alice", source="https://first.example")]

    result = merge(existing, [candidate("alice", source="https://second.example"), candidate("dave")])

    assert usernames(result.newly_added) == ["dave"]
    assert len(result.merged) == 2
    assert result.merged[0].source_url == "https://first.example"


def test_merge_first_occurrence_wins_within_batch():
    result = merge([], [candidate("bob", "https://a.example"), candidate("bob", "https://b.example")])

    assert usernames(result.merged) == ["bob"]
    assert result.merged[0].source_url == "https://a.example"


def test_merge_treats_handles_case_insensitively():
    result = merge([candidate("Alice")], [candidate("alice"), candidate("@ALICE")])

    assert result.newly_added == []
    assert usernames(result.merged) == ["Alice"]


def test_merge_with_nothing_new_leaves_existing_untouched():
    existing = [candidate("alice"), candidate("bob")]

    result = merge(existing, [])

    assert result.newly_added == []
    assert usernames(result.merged) == ["alice", "bob"]
    assert result.merged is not existing


def test_dedupe_pages_keeps_first_url():
    pages = [
        FetchedPage(title="A", url="https://socialblade.com/a", content="one"),
        FetchedPage(title="A again", url="https://SOCIALBLADE.com/a", content="two"),
        FetchedPage(title="B", url="https://socialblade.com/b", content="three"),
    ]

    unique = dedupe_pages(pages)

    assert [p.title for p in unique] == ["A", "B"]


def test_merge_keeps_distinct_profiles_given_as_urls_with_query_strings():
    result = merge(
        [],
        [
            candidate("https://www.instagram.com/alice/?hl=en"),
            candidate("https://www.instagram.com/bob/?hl=en"),
            candidate("https://www.instagram.com/Alice/#grid"),
        ],
    )

    assert [username_key(c) for c in result.merged] == ["alice", "bob"]
