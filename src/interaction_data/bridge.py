"""Routes reads and writes of the active KPI record.

Before the sampling decision the record lives in the session's in-memory
buffers; afterwards it lives in the durable model. ``samples_being_stored``
selects which one is active.
"""
from __future__ import annotations

import copy
from dataclasses import replace
from typing import Callable, Optional

from interaction_data.models.kpi import EventTuple
from interaction_data.session import SessionContext
from interaction_data.storage.model import InteractionDataModel


def get_current_kpis(ctx: SessionContext, model: InteractionDataModel) -> Optional[dict]:
    if ctx.sampling_enabled is False:
        return None
    if ctx.samples_being_stored:
        return model.get_current()
    return copy.deepcopy(ctx.initial_kpis)


def set_current_kpis(ctx: SessionContext, model: InteractionDataModel, kpis: dict) -> SessionContext:
    if ctx.samples_being_stored:
        model.set_current(kpis)
        return ctx
    return replace(ctx, initial_kpis=copy.deepcopy(kpis))


def get_current_event_stream(ctx: SessionContext, model: InteractionDataModel) -> Optional[list[EventTuple]]:
    if ctx.sampling_enabled is False:
        return None
    if ctx.samples_being_stored:
        current = model.get_current() or {}
        return current.get("event_stream") or []
    return copy.deepcopy(ctx.initial_event_stream)


def set_current_event_stream(ctx: SessionContext, model: InteractionDataModel, stream: list[EventTuple]) -> SessionContext:
    if ctx.samples_being_stored:
        current = model.get_current() or {}
        current["event_stream"] = stream
        model.set_current(current)
        return ctx
    return replace(ctx, initial_event_stream=copy.deepcopy(stream))


def publish_previous(model: InteractionDataModel, done: Optional[Callable[[bool], None]] = None) -> None:
    """Hand the previous session's record to the network and clear the slot.

    Must complete before the new session seeds its own durable record.
    """
    model.publish_current(done)
