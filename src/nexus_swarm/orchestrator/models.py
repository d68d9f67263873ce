"""Domain models for swarm planning, execution and audit events."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

PLANNED_EVENT = "planned"
COMPLETED_EVENT = "completed"


class WorkerRole(str, Enum):
    """Tags identifying who produced a task result."""

    FRONTEND = "frontend"
    BACKEND = "backend"
    QA = "qa"
    GENERAL = "general"
    SCHEDULER = "scheduler"
    SELF_CORRECTOR = "self-corrector"


@dataclass(frozen=True, slots=True)
class Task:
    """One planned unit of work.

    ``id`` is ``1 + line index`` of the description in the planner input, so
    ids are positive but not necessarily contiguous.
    """

    id: int
    description: str
    dependencies: frozenset[int] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class TaskResult:
    """Outcome of one task, emitted by a worker, the scheduler or the corrector."""

    id: int
    summary: str
    worker: WorkerRole


@dataclass(frozen=True, slots=True)
class SwarmEvent:
    """Audit trail entry.

    ``event`` is an open set of strings: values written by other tools must
    survive a load/save cycle untouched.
    """

    timestamp: int
    event: str
    detail: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize into the persisted JSON object shape."""

        return {
            "timestamp": self.timestamp,
            "event": self.event,
            "detail": self.detail,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> SwarmEvent:
        """Build event from a persisted JSON object."""

        timestamp = payload.get("timestamp", 0)
        if isinstance(timestamp, bool) or not isinstance(timestamp, int) or timestamp < 0:
            raise ValueError(f"Invalid swarm event timestamp: {timestamp!r}")
        event = payload.get("event")
        detail = payload.get("detail")
        if not isinstance(event, str) or not isinstance(detail, str):
            raise ValueError(f"Invalid swarm event payload: {dict(payload)!r}")
        return cls(timestamp=timestamp, event=event, detail=detail)
