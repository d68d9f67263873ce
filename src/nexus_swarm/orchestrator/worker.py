"""Simulated single-task worker with keyword-based role classification."""

from __future__ import annotations

import re
import time

from nexus_swarm.orchestrator.models import Task, TaskResult, WorkerRole

DEFAULT_WORKER_DELAY_SECONDS = 0.05

# First matching rule wins.
_ROLE_RULES: tuple[tuple[WorkerRole, re.Pattern[str]], ...] = (
    (WorkerRole.FRONTEND, re.compile(r"\b(?:frontend|ui)s?\b", re.IGNORECASE)),
    (WorkerRole.BACKEND, re.compile(r"\b(?:backend|api)s?\b", re.IGNORECASE)),
    (WorkerRole.QA, re.compile(r"\b(?:qa|test(?:s|ing)?)\b", re.IGNORECASE)),
)
_FAILURE_MARKER = "fail"


def classify_worker(description: str) -> WorkerRole:
    """Pick the worker role for a task description."""

    for role, pattern in _ROLE_RULES:
        if pattern.search(description):
            return role
    return WorkerRole.GENERAL


class SwarmWorker:
    """Executes one task; never raises, failures are reported in the summary."""

    def __init__(self, *, delay_seconds: float = DEFAULT_WORKER_DELAY_SECONDS) -> None:
        if delay_seconds < 0:
            raise ValueError("Worker delay must be >= 0.")
        self.delay_seconds = delay_seconds

    def execute(self, task: Task) -> TaskResult:
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        role = classify_worker(task.description)
        outcome = "failed" if _FAILURE_MARKER in task.description.lower() else "completed"
        return TaskResult(
            id=task.id,
            summary=f"{role.value} {outcome}: {task.description}",
            worker=role,
        )
