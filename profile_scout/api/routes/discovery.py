from __future__ import annotations

import json as _json

from fastapi import APIRouter
from sse_starlette.sse import EventSourceResponse

from profile_scout.agents.orchestrator import DiscoveryOrchestrator
from profile_scout.models.schemas import DiscoveryRequest
from profile_scout.services import logger as log_service
from profile_scout.services import streaming

router = APIRouter(prefix="/api/discovery", tags=["discovery"])


def get_orchestrator() -> DiscoveryOrchestrator:
    return DiscoveryOrchestrator()


@router.post("")
async def start_discovery(request: DiscoveryRequest):
    """Start a discovery session and stream its events as SSE."""
    orchestrator = get_orchestrator()
    events = orchestrator.discover(request.query)

    async def event_generator():
        log_service.log_event(
            event_type="discovery_started",
            message="Discovery started",
            query=request.query[:100],
            model=orchestrator.provider.model,
        )
        try:
            async for event in events:
                yield {
                    "event": event.event.value,
                    "data": _json.dumps(event.data),
                }
        except Exception as e:
            log_service.log_event(
                event_type="stream_error",
                message="Unhandled error in discovery stream",
                error=str(e),
                query=request.query[:100],
            )
            error_event = streaming.error("Discovery stream failed unexpectedly.")
            yield {
                "event": error_event.event.value,
                "data": _json.dumps(error_event.data),
            }
        finally:
            await events.aclose()

    return EventSourceResponse(event_generator())
