"""SQLModel ORM tables for swarm event storage."""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, Text
from sqlmodel import Field, SQLModel


class SwarmEventRow(SQLModel, table=True):
    __tablename__ = "swarm_events"  # type: ignore[bad-override]

    event_id: int | None = Field(default=None, primary_key=True)
    timestamp: int = Field(sa_column=Column(BigInteger, nullable=False, index=True))
    event: str = Field(index=True)
    detail: str = Field(sa_column=Column(Text, nullable=False))
