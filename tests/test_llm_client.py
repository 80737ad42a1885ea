"""Tests for the model providers."""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from profile_scout.errors import TransientProviderError
from profile_scout.llm_client import (
    AnthropicProvider,
    OpenAICompatibleProvider,
    OpenRouterProvider,
    available_models,
    extract_json_object,
    get_provider,
)
from profile_scout.models.schemas import SearchPlan


def openai_client(content: str, usage=None) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
            usage=usage,
        )
    )
    return client


class TestExtractJsonObject:
    def test_strips_code_fence(self):
        assert extract_json_object('```json\n{"a": 1}\n```') == {"a": 1}

    def test_finds_object_inside_prose(self):
        assert extract_json_object('Here you go: {"a": [1, 2]} done') == {"a": [1, 2]}

    def test_rejects_text_without_object(self):
        with pytest.raises(ValueError):
            extract_json_object("no json here")


class TestOpenAICompatibleProvider:
    @pytest.mark.asyncio
    async def test_structured_completion_is_validated(self):
        client = openai_client(
            '{"search_queries": ["nyc fashion bloggers"]}',
            usage=SimpleNamespace(total_tokens=120),
        )
        provider = OpenAICompatibleProvider(model="gpt-4o", client=client)

        completion = await provider.complete("find people", "be helpful", SearchPlan)

        assert completion.value == SearchPlan(search_queries=["nyc fashion bloggers"])
        assert completion.total_tokens == 120
        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0
        assert kwargs["messages"][0]["content"].startswith("be helpful")
        assert "search_queries" in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_usage_falls_back_to_prompt_plus_completion(self):
        client = openai_client(
            "plain answer",
            usage=SimpleNamespace(total_tokens=None, prompt_tokens=30, completion_tokens=12),
        )
        provider = OpenAICompatibleProvider(model="gpt-4o", client=client)

        completion = await provider.complete("q", "s")

        assert completion.value == "plain answer"
        assert completion.total_tokens == 42
        assert "response_format" not in client.chat.completions.create.await_args.kwargs

    @pytest.mark.asyncio
    async def test_invalid_structured_output_is_transient(self):
        provider = OpenAICompatibleProvider(model="gpt-4o", client=openai_client("not json"))

        with pytest.raises(TransientProviderError):
            await provider.complete("q", "s", SearchPlan)

    @pytest.mark.asyncio
    async def test_sdk_errors_are_transient(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=RuntimeError("rate limited"))
        provider = OpenAICompatibleProvider(model="gpt-4o", client=client)

        with pytest.raises(TransientProviderError, match="rate limited"):
            await provider.complete("q", "s", SearchPlan)

    def test_gpt5_models_use_default_temperature(self):
        assert OpenAICompatibleProvider._temperature_for_model("openai/gpt-5-mini") == 1


class TestAnthropicProvider:
    @pytest.mark.asyncio
    async def test_structured_output_comes_from_forced_tool(self):
        client = MagicMock()
        client.messages.create = AsyncMock(
            return_value=SimpleNamespace(
                content=[
                    SimpleNamespace(type="tool_use", input={"search_queries": ["a", "b"]}),
                ],
                usage=SimpleNamespace(input_tokens=50, output_tokens=7),
            )
        )
        provider = AnthropicProvider(model="claude-3-5-sonnet-20241022", client=client)

        completion = await provider.complete("q", "s", SearchPlan)

        assert completion.value.search_queries == ["a", "b"]
        assert completion.total_tokens == 57
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["tool_choice"] == {"type": "tool", "name": AnthropicProvider.TOOL_NAME}
        assert kwargs["tools"][0]["input_schema"] == SearchPlan.model_json_schema()

    @pytest.mark.asyncio
    async def test_missing_tool_block_is_transient(self):
        client = MagicMock()
        client.messages.create = AsyncMock(
            return_value=SimpleNamespace(content=[SimpleNamespace(type="text", text="hi")], usage=None)
        )
        provider = AnthropicProvider(model="claude", client=client)

        with pytest.raises(TransientProviderError):
            await provider.complete("q", "s", SearchPlan)


class TestGetProvider:
    def test_builds_configured_provider(self):
        with patch("profile_scout.llm_client.settings") as mock_settings:
            mock_settings.model_provider = "openrouter"
            mock_settings.default_model = ""
            mock_settings.model_max_tokens = 1024

            provider = get_provider()

        assert isinstance(provider, OpenRouterProvider)
        assert provider.model == OpenRouterProvider.default_model
        assert provider.max_tokens == 1024

    def test_explicit_model_wins(self):
        provider = get_provider("anthropic", model="claude-3-haiku-20240307")

        assert isinstance(provider, AnthropicProvider)
        assert provider.model == "claude-3-haiku-20240307"

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError, match="Unsupported MODEL_PROVIDER"):
            get_provider("gemini")

    def test_openrouter_client_uses_base_url(self):
        with (
            patch("profile_scout.llm_client.settings") as mock_settings,
            patch("openai.AsyncOpenAI") as mock_openai,
        ):
            mock_settings.openrouter_api_key = "sk-or-valid-key"
            mock_settings.openrouter_base_url = "https://openrouter.ai/api/v1"
            mock_settings.default_model = ""
            mock_settings.model_max_tokens = 1024

            OpenRouterProvider().client

        mock_openai.assert_called_once_with(
            api_key="sk-or-valid-key",
            base_url="https://openrouter.ai/api/v1",
        )


def test_available_models_marks_active_provider():
    with patch("profile_scout.llm_client.settings") as mock_settings:
        mock_settings.model_provider = "anthropic"

        models = available_models()

    assert [m["id"] for m in models] == ["openrouter", "openai", "anthropic"]
    assert [m["active"] for m in models] == [False, False, True]
