"""Event stream recording: translation, dedup and time-base correction."""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import replace
from typing import Any, Optional, Tuple

from prometheus_client import Counter

from interaction_data.bridge import get_current_event_stream, set_current_event_stream
from interaction_data.messages import Message, message_name
from interaction_data.models.kpi import EventTuple, OFFSET_INDEX, REPEAT_COUNT_INDEX
from interaction_data.session import SessionContext, now_ms, to_epoch_ms
from interaction_data.storage.model import InteractionDataModel
from interaction_data.translation import translate

logger = logging.getLogger(__name__)

# Consecutive identical network completions collapse into one tuple
REPEATABLE_EVENT = re.compile(r"^xhr_complete")

EVENTS_RECORDED = Counter('interaction_events_recorded_total', 'Events appended to the KPI event stream')
EVENTS_COLLAPSED = Counter('interaction_events_collapsed_total', 'Repeated network completions folded into the previous tuple')
EVENTS_DROPPED = Counter('interaction_events_dropped_total', 'Events dropped by the name table')


def update_start_time(ctx: SessionContext, model: InteractionDataModel, new_start_time: Any) -> SessionContext:
    """Move the session start and re-base every offset already recorded.

    A value that is not a time leaves the context untouched.
    """
    try:
        new_start = to_epoch_ms(new_start_time)
    except (TypeError, ValueError, OverflowError):
        logger.warning("ignoring start_time with unusable value %r", new_start_time)
        return ctx
    stream = get_current_event_stream(ctx, model)
    if stream:
        delta = ctx.start_time - new_start
        for event in stream:
            event[OFFSET_INDEX] += delta
        ctx = set_current_event_stream(ctx, model, stream)
    return replace(ctx, start_time=new_start)


def collapse_repeat(
    ctx: SessionContext,
    model: InteractionDataModel,
    event_name: str,
    msg: Optional[str] = None,
) -> Tuple[SessionContext, Optional[EventTuple]]:
    """Bump the repeat count of the last tuple if ``event_name`` repeats it.

    Only network completions repeat, recognised either by the message they
    came from or by their reporting name.
    """
    if not (REPEATABLE_EVENT.match(event_name) or (msg and REPEATABLE_EVENT.match(msg))):
        return ctx, None
    stream = get_current_event_stream(ctx, model)
    if not stream:
        return ctx, None
    last = stream[-1]
    if last[0] != event_name:
        return ctx, None

    while len(last) <= REPEAT_COUNT_INDEX:
        last.append(None)
    last[REPEAT_COUNT_INDEX] = (last[REPEAT_COUNT_INDEX] or 1) + 1
    EVENTS_COLLAPSED.inc()
    return set_current_event_stream(ctx, model, stream), last


def record_event(
    ctx: SessionContext,
    model: InteractionDataModel,
    msg: str | Message,
    data: Any = None,
    now: Optional[int] = None,
) -> Tuple[SessionContext, Optional[EventTuple]]:
    """Record one mediator message; returns the updated context and the tuple written."""
    msg = message_name(msg)

    if msg == Message.START_TIME.value:
        return update_start_time(ctx, model, data), None

    if ctx.sampling_enabled is False:
        return ctx, None

    payload = data if isinstance(data, Mapping) else {}

    event_name = translate(ctx.name_table, msg, payload, strict=ctx.strict_event_names)
    if not event_name:
        EVENTS_DROPPED.inc()
        logger.debug("dropping '%s' from the event stream", msg)
        return ctx, None

    ctx, repeated = collapse_repeat(ctx, model, event_name, msg)
    if repeated is not None:
        return ctx, repeated

    at = now if now is not None else now_ms()
    event_time = payload.get("eventTime")
    if event_time is not None:
        try:
            at = to_epoch_ms(event_time)
        except (TypeError, ValueError, OverflowError):
            logger.warning("unusable eventTime %r on '%s', using the current time", event_time, msg)
    event: EventTuple = [event_name, at - ctx.start_time]
    if payload.get("duration"):
        event.append(payload["duration"])

    stream = get_current_event_stream(ctx, model)
    if stream is None:
        return ctx, None
    stream.append(event)
    EVENTS_RECORDED.inc()
    return set_current_event_stream(ctx, model, stream), event
