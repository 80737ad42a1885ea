from __future__ import annotations

import pytest

from profile_scout.services.prompt_store import render_prompt


def test_render_prompt_substitutes_template_values():
    prompt = render_prompt(
        "planner.system",
        platform="TikTok",
        year=2026,
        max_queries=3,
    )
    assert "TikTok" in prompt
    assert "2026" in prompt
    assert "$" not in prompt


def test_render_prompt_joins_line_lists():
    prompt = render_prompt("extractor.system", platform="Instagram")
    assert "\n" in prompt


def test_render_prompt_raises_for_missing_value():
    with pytest.raises(KeyError, match="platform"):
        render_prompt("planner.user", query="vegan chefs")


def test_render_prompt_raises_for_unknown_key():
    with pytest.raises(KeyError):
        render_prompt("missing.prompt.key")
