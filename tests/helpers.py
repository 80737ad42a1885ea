from __future__ import annotations

import inspect
from typing import Any, Callable

from profile_scout.llm_client import Completion, ModelProvider
from profile_scout.services.activity import EventChannel


class ScriptedProvider(ModelProvider):
    """Model provider whose answers come from a test-supplied handler.

    The handler receives (prompt, system, schema) and returns a value, a
    Completion, or an exception instance to raise. It may be async.
    """

    name = "scripted"
    default_model = "scripted-model"

    def __init__(self, handler: Callable[..., Any], tokens_per_call: int = 10):
        super().__init__(model="scripted-model")
        self.handler = handler
        self.tokens_per_call = tokens_per_call
        self.calls: list[tuple[str, str, Any]] = []

    async def complete(self, prompt, system, schema=None) -> Completion:
        self.calls.append((prompt, system, schema))
        result = self.handler(prompt, system, schema)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, Exception):
            raise result
        if isinstance(result, Completion):
            return result
        return Completion(value=result, total_tokens=self.tokens_per_call)


def drain(channel: EventChannel) -> list:
    """Pull every event queued so far without waiting."""
    events = []
    while not channel._queue.empty():
        item = channel._queue.get_nowait()
        if hasattr(item, "event"):
            events.append(item)
    return events


def activities(events: list, kind: str | None = None, status: str | None = None) -> list[dict]:
    found = [e.data for e in events if e.event.value == "activity"]
    if kind:
        found = [a for a in found if a["kind"] == kind]
    if status:
        found = [a for a in found if a["status"] == status]
    return found


