"""Runtime configuration for swarm orchestration and event storage."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from nexus_swarm.orchestrator.planner import DEPENDENCY_MODES, SELF_DEPENDENCY_POLICIES
from nexus_swarm.orchestrator.worker import DEFAULT_WORKER_DELAY_SECONDS

EVENT_STORE_KINDS = ("json", "sqlite")


@dataclass(slots=True)
class SwarmSettings:
    """Planning and scheduling settings."""

    max_concurrency: int | None = None
    worker_delay_seconds: float = DEFAULT_WORKER_DELAY_SECONDS
    dependency_mode: str = "substring"
    self_dependency: str = "allow"


@dataclass(slots=True)
class StorageSettings:
    """Swarm event log persistence settings."""

    event_store: str = "json"
    events_path: Path = field(default_factory=lambda: default_config_dir() / "swarm-events.json")
    db_path: Path = Path(".nexus_swarm.db")
    sqlite_busy_timeout_ms: int = 5_000


@dataclass(slots=True)
class Settings:
    """Application settings grouped by domain concerns."""

    swarm: SwarmSettings = field(default_factory=SwarmSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    log_level: str = "WARNING"

    @classmethod
    def from_env(
        cls,
        *,
        event_store: str | None = None,
        events_path: Path | None = None,
        db_path: Path | None = None,
        max_concurrency: int | None = None,
    ) -> Settings:
        """Load settings from environment; explicit arguments take precedence."""

        env_events_path = os.getenv("NEXUS_SWARM_EVENTS_PATH", "").strip()
        settings = cls(
            swarm=SwarmSettings(
                max_concurrency=(
                    max_concurrency
                    if max_concurrency is not None
                    else _env_optional_int("NEXUS_SWARM_MAX_CONCURRENCY")
                ),
                worker_delay_seconds=float(
                    os.getenv(
                        "NEXUS_SWARM_WORKER_DELAY_SECONDS",
                        str(DEFAULT_WORKER_DELAY_SECONDS),
                    ),
                ),
                dependency_mode=os.getenv("NEXUS_SWARM_DEPENDENCY_MODE", "substring")
                .strip()
                .lower(),
                self_dependency=os.getenv("NEXUS_SWARM_SELF_DEPENDENCY", "allow").strip().lower(),
            ),
            storage=StorageSettings(
                event_store=(event_store or os.getenv("NEXUS_SWARM_EVENT_STORE", "json"))
                .strip()
                .lower(),
                events_path=events_path
                or (
                    Path(env_events_path)
                    if env_events_path
                    else default_config_dir() / "swarm-events.json"
                ),
                db_path=db_path or Path(os.getenv("NEXUS_DB_PATH", ".nexus_swarm.db")),
                sqlite_busy_timeout_ms=int(os.getenv("NEXUS_SQLITE_BUSY_TIMEOUT_MS", "5000")),
            ),
            log_level=os.getenv("NEXUS_LOG_LEVEL", "WARNING").strip().upper(),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Raise configuration error on unsupported or out-of-range values."""

        if self.swarm.max_concurrency is not None and self.swarm.max_concurrency < 1:
            raise ValueError("NEXUS_SWARM_MAX_CONCURRENCY must be a positive integer.")
        if self.swarm.worker_delay_seconds < 0:
            raise ValueError("NEXUS_SWARM_WORKER_DELAY_SECONDS must be >= 0.")
        if self.swarm.dependency_mode not in DEPENDENCY_MODES:
            raise ValueError(
                f"Invalid NEXUS_SWARM_DEPENDENCY_MODE: {self.swarm.dependency_mode!r}. "
                f"Expected one of: {', '.join(DEPENDENCY_MODES)}",
            )
        if self.swarm.self_dependency not in SELF_DEPENDENCY_POLICIES:
            raise ValueError(
                f"Invalid NEXUS_SWARM_SELF_DEPENDENCY: {self.swarm.self_dependency!r}. "
                f"Expected one of: {', '.join(SELF_DEPENDENCY_POLICIES)}",
            )
        if self.storage.event_store not in EVENT_STORE_KINDS:
            raise ValueError(
                f"Invalid NEXUS_SWARM_EVENT_STORE: {self.storage.event_store!r}. "
                f"Expected one of: {', '.join(EVENT_STORE_KINDS)}",
            )
        if self.storage.sqlite_busy_timeout_ms <= 0:
            raise ValueError("NEXUS_SQLITE_BUSY_TIMEOUT_MS must be > 0.")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Invalid NEXUS_LOG_LEVEL: {self.log_level!r}")


def default_config_dir() -> Path:
    """Per-user config directory for the nexus tool."""

    base = os.getenv("XDG_CONFIG_HOME", "").strip()
    root = Path(base) if base else Path.home() / ".config"
    return root / "nexus"


def _env_optional_int(name: str) -> int | None:
    value = os.getenv(name, "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error
