"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from nexus_swarm.orchestrator.models import Task, TaskResult
from nexus_swarm.orchestrator.worker import SwarmWorker

_NEXUS_ENV_VARS = (
    "NEXUS_SWARM_EVENT_STORE",
    "NEXUS_SWARM_EVENTS_PATH",
    "NEXUS_DB_PATH",
    "NEXUS_SQLITE_BUSY_TIMEOUT_MS",
    "NEXUS_SWARM_MAX_CONCURRENCY",
    "NEXUS_SWARM_WORKER_DELAY_SECONDS",
    "NEXUS_SWARM_DEPENDENCY_MODE",
    "NEXUS_SWARM_SELF_DEPENDENCY",
    "NEXUS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch):
    """Keep tests away from the real config dir and from ambient NEXUS_* settings."""
    for name in _NEXUS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("NEXUS_SWARM_WORKER_DELAY_SECONDS", "0")


@pytest.fixture()
def instant_worker() -> SwarmWorker:
    return SwarmWorker(delay_seconds=0)


class RecordingWorker:
    """Worker double that records when each task started relative to others."""

    def __init__(self) -> None:
        self.started: list[int] = []
        self._inner = SwarmWorker(delay_seconds=0)

    def execute(self, task: Task) -> TaskResult:
        self.started.append(task.id)
        return self._inner.execute(task)


@pytest.fixture()
def recording_worker() -> RecordingWorker:
    return RecordingWorker()
