from __future__ import annotations

import time
from typing import Any

from profile_scout.models.events import ActivityKind, ActivityStatus, EventType, SSEEvent
from profile_scout.models.session import SessionState


def activity(
    kind: ActivityKind,
    status: ActivityStatus,
    message: str,
    *,
    completed_steps: int,
    tokens_used: int,
    timestamp: int | None = None,
) -> SSEEvent:
    """Progress event; counters are snapshotted at emission time."""
    return SSEEvent(
        event=EventType.ACTIVITY,
        data={
            "kind": kind.value,
            "status": status.value,
            "message": message,
            "timestamp": timestamp if timestamp is not None else int(time.time() * 1000),
            "completedSteps": completed_steps,
            "tokensUsed": tokens_used,
        },
    )


def partial_results(session: SessionState, newly_added: int) -> SSEEvent:
    return SSEEvent(
        event=EventType.PARTIAL_RESULTS,
        data={
            "candidates": session.candidate_dicts(),
            "totalCandidates": len(session.candidates),
            "newlyAdded": newly_added,
            "originalQuery": session.original_query,
            "iteration": session.iteration,
        },
    )


def results(session: SessionState) -> SSEEvent:
    return SSEEvent(
        event=EventType.RESULTS,
        data={
            "candidates": session.candidate_dicts(),
            "totalCandidates": len(session.candidates),
            "originalQuery": session.original_query,
            "iterations": session.iteration,
            "tokensUsed": session.tokens_used,
        },
    )


def error(message: str, **kwargs: Any) -> SSEEvent:
    return SSEEvent(event=EventType.ERROR, data={"message": message, **kwargs})
