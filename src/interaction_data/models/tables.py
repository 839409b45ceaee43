from __future__ import annotations
from datetime import datetime
from sqlalchemy import String, Integer, BigInteger, DateTime, JSON, Float, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column
from interaction_data.infrastructure.db import Base


class InteractionDataSlot(Base):
    """Durable slot holding the record of the current dialog session.

    A single row keyed by ``slot``; absent row means nothing is stored.
    """
    __tablename__ = "interaction_data_slot"
    slot: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[dict] = mapped_column(JSON)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class InteractionRecord(Base):
    """A KPI record received by the collection endpoint."""
    __tablename__ = "interaction_records"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    received_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    timestamp: Mapped[int | None] = mapped_column(BigInteger, index=True, default=None)
    sample_rate: Mapped[float | None] = mapped_column(Float, default=None)
    lang: Mapped[str | None] = mapped_column(String(32), default=None)
    new_account: Mapped[bool] = mapped_column(Boolean, default=False)
    event_count: Mapped[int] = mapped_column(Integer, default=0)
    payload: Mapped[dict] = mapped_column(JSON)

    __table_args__ = (
        Index("ix_interaction_records_ts_lang", "timestamp", "lang"),
    )
