from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    ACTIVITY = "activity"
    PARTIAL_RESULTS = "partial-results"
    RESULTS = "results"
    ERROR = "error"


class ActivityKind(str, Enum):
    PLANNING = "planning"
    SEARCH = "search"
    EXTRACT = "extract"
    ANALYZE = "analyze"


class ActivityStatus(str, Enum):
    PENDING = "pending"
    COMPLETE = "complete"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class SSEEvent:
    event: EventType
    data: dict[str, Any] = field(default_factory=dict)
