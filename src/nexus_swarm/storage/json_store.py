"""JSON file backed swarm event log."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from nexus_swarm.orchestrator.models import SwarmEvent
from nexus_swarm.storage.base import EventStoreError

logger = logging.getLogger(__name__)


class JsonFileEventStore:
    """Persists events as one pretty-printed JSON array."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> list[SwarmEvent]:
        """Read events; a missing or unparsable file counts as an empty log."""

        if not self.path.exists():
            return []
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as error:
            raise EventStoreError(f"Cannot read swarm events from {self.path}: {error}") from error
        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError("top-level value is not an array")
            return [SwarmEvent.from_dict(item) for item in payload]
        except (ValueError, TypeError, AttributeError) as error:
            logger.warning("Ignoring unreadable swarm event log %s: %s", self.path, error)
            return []

    def append(self, events: Iterable[SwarmEvent]) -> None:
        self.save([*self.load(), *events])

    def save(self, events: Iterable[SwarmEvent]) -> None:
        data = json.dumps([event.to_dict() for event in events], indent=2, ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(data, encoding="utf-8")
        except OSError as error:
            raise EventStoreError(f"Cannot write swarm events to {self.path}: {error}") from error

    def clear(self) -> None:
        self.save([])
