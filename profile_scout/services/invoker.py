from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from profile_scout.config import settings
from profile_scout.errors import ExhaustedRetries
from profile_scout.llm_client import ModelProvider
from profile_scout.models.events import ActivityKind, ActivityStatus
from profile_scout.models.session import SessionState
from profile_scout.services import logger as log_service
from profile_scout.services.activity import ActivityEmitter


@dataclass
class ModelRequest:
    prompt: str
    system: str
    schema: type[BaseModel] | None = None
    activity_kind: ActivityKind = ActivityKind.SEARCH
    caller: str = "model"


class RetryableInvoker:
    """Runs one model request with bounded retries and linear backoff.

    Every successful attempt is charged to the session counters. After
    ``max_attempts`` failures the last error is raised as ``ExhaustedRetries``;
    callers decide how to degrade.
    """

    def __init__(
        self,
        provider: ModelProvider,
        session: SessionState,
        emitter: ActivityEmitter,
        *,
        max_attempts: int | None = None,
        base_delay_ms: int | None = None,
    ):
        self.provider = provider
        self.session = session
        self.emitter = emitter
        self.max_attempts = max(
            int(max_attempts if max_attempts is not None else settings.max_retry_attempts), 1
        )
        self.base_delay_s = max(
            int(base_delay_ms if base_delay_ms is not None else settings.retry_base_delay_ms), 0
        ) / 1000.0

    async def invoke(self, request: ModelRequest) -> Any:
        attempts = 0
        last_error: Exception | None = None

        while attempts < self.max_attempts:
            t0 = time.monotonic()
            try:
                completion = await self.provider.complete(
                    request.prompt, request.system, request.schema
                )
            except Exception as e:
                attempts += 1
                last_error = e
                log_service.log_llm_call(
                    model=self.provider.model,
                    caller=request.caller,
                    duration_ms=int((time.monotonic() - t0) * 1000),
                    attempt=attempts,
                    status="failed",
                    error=str(e),
                )
                if attempts >= self.max_attempts:
                    break
                self.emitter.add(
                    request.activity_kind,
                    ActivityStatus.WARNING,
                    f"Model call failed, attempt {attempts}/{self.max_attempts}. Retrying...",
                )
                await asyncio.sleep(self.base_delay_s * attempts)
                continue

            self.session.record_model_call(completion.total_tokens)
            log_service.log_llm_call(
                model=self.provider.model,
                caller=request.caller,
                total_tokens=completion.total_tokens,
                duration_ms=int((time.monotonic() - t0) * 1000),
                attempt=attempts + 1,
            )
            return completion.value

        raise ExhaustedRetries(request.caller, attempts, last_error) from last_error
