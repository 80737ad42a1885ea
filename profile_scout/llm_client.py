"""Language-model providers behind one ``complete`` capability.

A provider is chosen once per orchestrator from ``settings.model_provider``;
pipeline code only ever talks to the ``ModelProvider`` interface.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from profile_scout.config import settings
from profile_scout.errors import TransientProviderError
from profile_scout.services.prompt_store import render_prompt


@dataclass
class Completion:
    value: Any
    total_tokens: int = 0


def extract_json_object(raw_text: str) -> dict[str, Any]:
    text = raw_text.strip()
    if text.startswith("```"):
        parts = text.split("```")
        if len(parts) >= 2:
            text = parts[1]
        if text.startswith("json"):
            text = text[4:]
        text = text.strip()
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        raise json.JSONDecodeError("object not found", text, 0)
    parsed = json.loads(text[start : end + 1])
    if not isinstance(parsed, dict):
        raise json.JSONDecodeError("not an object", text, 0)
    return parsed


def validate_structured(provider: str, schema: type[BaseModel], payload: Any) -> BaseModel:
    """Validate a provider payload (JSON text or dict) against ``schema``."""
    try:
        if isinstance(payload, str):
            payload = extract_json_object(payload)
        return schema.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as e:
        raise TransientProviderError(provider, f"invalid structured output: {e}") from e


class ModelProvider:
    """Base class for language-model backends."""

    name: str = "base"
    label: str = "Base"
    description: str = ""
    default_model: str = ""

    def __init__(self, model: str | None = None, *, client: Any = None, max_tokens: int | None = None):
        self.model = model or settings.default_model or self.default_model
        self.max_tokens = max_tokens or settings.model_max_tokens
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self._build_client()
        return self._client

    def _build_client(self) -> Any:
        raise NotImplementedError

    async def complete(
        self,
        prompt: str,
        system: str,
        schema: type[BaseModel] | None = None,
    ) -> Completion:
        raise NotImplementedError


class OpenAICompatibleProvider(ModelProvider):
    """Chat-completions backend reached through the OpenAI SDK."""

    name = "openai"
    label = "OpenAI"
    description = "OpenAI chat completions API."
    default_model = "gpt-4o"

    def _api_key(self) -> str:
        return settings.openai_api_key

    def _base_url(self) -> str | None:
        return None

    def _build_client(self) -> Any:
        from openai import AsyncOpenAI

        kwargs: dict[str, Any] = {"api_key": self._api_key()}
        base_url = self._base_url()
        if base_url:
            kwargs["base_url"] = base_url
        return AsyncOpenAI(**kwargs)

    @staticmethod
    def _temperature_for_model(model: str) -> int:
        # Some OpenAI GPT-5-compatible gateways reject temperature=0.
        lowered = (model or "").lower()
        if "gpt-5" in lowered:
            return 1
        return 0

    async def complete(
        self,
        prompt: str,
        system: str,
        schema: type[BaseModel] | None = None,
    ) -> Completion:
        if schema is not None:
            system = system + render_prompt(
                "structured.json_instruction",
                schema_json=json.dumps(schema.model_json_schema()),
            )
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self._temperature_for_model(self.model),
        }
        if schema is not None:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(**kwargs)
        except Exception as e:
            raise TransientProviderError(self.name, str(e)) from e

        choices = getattr(response, "choices", None) or []
        text = (getattr(choices[0].message, "content", None) or "") if choices else ""
        usage = getattr(response, "usage", None)
        total_tokens = 0
        if usage:
            total_tokens = getattr(usage, "total_tokens", 0) or (
                (getattr(usage, "prompt_tokens", 0) or 0)
                + (getattr(usage, "completion_tokens", 0) or 0)
            )

        if schema is None:
            return Completion(value=text, total_tokens=total_tokens)
        return Completion(
            value=validate_structured(self.name, schema, text),
            total_tokens=total_tokens,
        )


class OpenRouterProvider(OpenAICompatibleProvider):
    name = "openrouter"
    label = "OpenRouter"
    description = "Any OpenRouter-hosted model through the OpenAI-compatible API."
    default_model = "anthropic/claude-3.5-sonnet"

    def _api_key(self) -> str:
        return settings.openrouter_api_key

    def _base_url(self) -> str | None:
        return settings.openrouter_base_url.strip() or "https://openrouter.ai/api/v1"


class AnthropicProvider(ModelProvider):
    """Anthropic Messages API; structured output is forced through a single tool."""

    name = "anthropic"
    label = "Anthropic"
    description = "Claude models through the Anthropic Messages API."
    default_model = "claude-3-5-sonnet-20241022"

    TOOL_NAME = "record_output"

    def _build_client(self) -> Any:
        import anthropic

        return anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)

    async def complete(
        self,
        prompt: str,
        system: str,
        schema: type[BaseModel] | None = None,
    ) -> Completion:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": system,
            "messages": [{"role": "user", "content": prompt}],
        }
        if schema is not None:
            kwargs["tools"] = [
                {
                    "name": self.TOOL_NAME,
                    "description": "Record the structured answer.",
                    "input_schema": schema.model_json_schema(),
                }
            ]
            kwargs["tool_choice"] = {"type": "tool", "name": self.TOOL_NAME}

        try:
            response = await self.client.messages.create(**kwargs)
        except Exception as e:
            raise TransientProviderError(self.name, str(e)) from e

        usage = getattr(response, "usage", None)
        total_tokens = (
            (getattr(usage, "input_tokens", 0) or 0) + (getattr(usage, "output_tokens", 0) or 0)
            if usage
            else 0
        )
        blocks = getattr(response, "content", None) or []

        if schema is None:
            text = "\n".join(
                b.text for b in blocks if getattr(b, "type", None) == "text" and b.text
            )
            return Completion(value=text, total_tokens=total_tokens)

        tool_block = next((b for b in blocks if getattr(b, "type", None) == "tool_use"), None)
        if tool_block is None:
            raise TransientProviderError(self.name, "response contained no tool_use block")
        return Completion(
            value=validate_structured(self.name, schema, tool_block.input),
            total_tokens=total_tokens,
        )


PROVIDERS: dict[str, type[ModelProvider]] = {
    OpenRouterProvider.name: OpenRouterProvider,
    OpenAICompatibleProvider.name: OpenAICompatibleProvider,
    AnthropicProvider.name: AnthropicProvider,
}


def get_provider(name: str | None = None, model: str | None = None) -> ModelProvider:
    """Build the configured provider."""
    key = (name or settings.model_provider).lower().strip()
    provider_cls = PROVIDERS.get(key)
    if provider_cls is None:
        raise ValueError(f"Unsupported MODEL_PROVIDER: {key}")
    return provider_cls(model=model)


def available_models() -> list[dict[str, Any]]:
    active = settings.model_provider.lower().strip()
    return [
        {
            "id": provider_cls.name,
            "name": provider_cls.label,
            "description": f"{provider_cls.description} Default model: {provider_cls.default_model}.",
            "active": provider_cls.name == active,
        }
        for provider_cls in PROVIDERS.values()
    ]
