"""SQLite event store backed by SQLModel."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool
from sqlmodel import Session, SQLModel, col, create_engine, delete, select

from nexus_swarm.orchestrator.models import SwarmEvent
from nexus_swarm.storage.base import EventStoreError
from nexus_swarm.storage.sqlmodel_models import SwarmEventRow


class SqliteEventStore:
    """Event log facade backed by SQLModel + SQLite.

    Rows are ordered by their autoincrement key, which preserves insertion
    order across appends. Connections are not pooled and wait up to the busy
    timeout on a locked database.
    """

    def __init__(self, db_path: Path, *, busy_timeout_ms: int = 5_000) -> None:
        self.db_path = db_path
        self.busy_timeout_ms = max(1, busy_timeout_ms)
        self.engine = create_engine(
            f"sqlite:///{db_path}",
            connect_args={"timeout": self.busy_timeout_ms / 1000.0},
            poolclass=NullPool,
        )
        event.listen(self.engine, "connect", self._configure_connection)

    def _configure_connection(self, dbapi_connection, _connection_record) -> None:
        dbapi_connection.execute("PRAGMA journal_mode = WAL")
        dbapi_connection.execute(f"PRAGMA busy_timeout = {self.busy_timeout_ms}")

    def close(self) -> None:
        """Close underlying DB resources."""

        self.engine.dispose()

    def init_schema(self) -> None:
        """Create the event table when missing."""

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            SQLModel.metadata.create_all(self.engine, tables=[SwarmEventRow.__table__])
        except (OSError, SQLAlchemyError) as error:
            raise EventStoreError(
                f"Cannot initialize event store {self.db_path}: {error}",
            ) from error

    def load(self) -> list[SwarmEvent]:
        try:
            with Session(self.engine) as session:
                rows = session.exec(
                    select(SwarmEventRow).order_by(col(SwarmEventRow.event_id).asc()),
                ).all()
                return [_to_event(row) for row in rows]
        except SQLAlchemyError as error:
            raise EventStoreError(
                f"Cannot read swarm events from {self.db_path}: {error}",
            ) from error

    def append(self, events: Iterable[SwarmEvent]) -> None:
        try:
            with Session(self.engine) as session:
                session.add_all(_to_row(event) for event in events)
                session.commit()
        except SQLAlchemyError as error:
            raise EventStoreError(
                f"Cannot append swarm events to {self.db_path}: {error}",
            ) from error

    def save(self, events: Iterable[SwarmEvent]) -> None:
        try:
            with Session(self.engine) as session:
                session.exec(delete(SwarmEventRow))
                session.add_all(_to_row(event) for event in events)
                session.commit()
        except SQLAlchemyError as error:
            raise EventStoreError(
                f"Cannot write swarm events to {self.db_path}: {error}",
            ) from error

    def clear(self) -> None:
        self.save([])


def _to_row(event: SwarmEvent) -> SwarmEventRow:
    return SwarmEventRow(timestamp=event.timestamp, event=event.event, detail=event.detail)


def _to_event(row: SwarmEventRow) -> SwarmEvent:
    return SwarmEvent(timestamp=row.timestamp, event=row.event, detail=row.detail)
