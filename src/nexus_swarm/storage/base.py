"""Event store interface shared by persistence adapters."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from nexus_swarm.orchestrator.models import SwarmEvent


class EventStoreError(RuntimeError):
    """Raised when an event store cannot read or write its backing storage."""


class EventStore(Protocol):
    """Ordered, append-only audit log of swarm events.

    ``append`` is a load-mutate-save cycle without locking; concurrent writers
    may lose each other's updates.
    """

    def load(self) -> list[SwarmEvent]:
        """Return all persisted events in insertion order."""

    def append(self, events: Iterable[SwarmEvent]) -> None:
        """Add events after the existing ones."""

    def save(self, events: Iterable[SwarmEvent]) -> None:
        """Replace the whole persisted collection."""

    def clear(self) -> None:
        """Drop every persisted event."""


class InMemoryEventStore:
    """List-backed store for tests and embedding."""

    def __init__(self, events: Iterable[SwarmEvent] = ()) -> None:
        self._events: list[SwarmEvent] = list(events)

    def load(self) -> list[SwarmEvent]:
        return list(self._events)

    def append(self, events: Iterable[SwarmEvent]) -> None:
        self._events = [*self._events, *events]

    def save(self, events: Iterable[SwarmEvent]) -> None:
        self._events = list(events)

    def clear(self) -> None:
        self.save([])
