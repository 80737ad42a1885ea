from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4

from profile_scout.models.schemas import Candidate


@dataclass(slots=True)
class FetchedPage:
    title: str
    url: str
    content: str


@dataclass
class SessionState:
    """Mutable state for one discovery run.

    Only the orchestrator writes ``candidates``, ``attempted_queries``,
    ``processed_identifiers`` and ``iteration``. The counters are bumped by
    workers through ``record_model_call``/``record_step``, which never await,
    so increments cannot interleave on the event loop.
    """

    original_query: str
    candidates: list[Candidate] = field(default_factory=list)
    completed_steps: int = 0
    tokens_used: int = 0
    processed_identifiers: set[str] = field(default_factory=set)
    attempted_queries: list[str] = field(default_factory=list)
    iteration: int = 0
    session_id: str = field(default_factory=lambda: uuid4().hex)

    def record_model_call(self, total_tokens: int) -> None:
        self.tokens_used += max(int(total_tokens or 0), 0)
        self.completed_steps += 1

    def record_step(self) -> None:
        self.completed_steps += 1

    def has_attempted(self, query: str) -> bool:
        key = " ".join(query.split()).lower()
        return any(" ".join(q.split()).lower() == key for q in self.attempted_queries)

    def candidate_dicts(self) -> list[dict]:
        return [c.to_dict() for c in self.candidates]
