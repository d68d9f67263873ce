"""Persistence adapters for the swarm audit log."""

from nexus_swarm.storage.base import EventStore, EventStoreError, InMemoryEventStore
from nexus_swarm.storage.json_store import JsonFileEventStore
from nexus_swarm.storage.sqlite_store import SqliteEventStore

__all__ = [
    "EventStore",
    "EventStoreError",
    "InMemoryEventStore",
    "JsonFileEventStore",
    "SqliteEventStore",
]
