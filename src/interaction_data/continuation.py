"""Resuming collection after a redirect to the IdP and back."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Tuple

from interaction_data.session import SessionContext, now_ms, parse_local_timestamp
from interaction_data.storage.model import InteractionDataModel

logger = logging.getLogger(__name__)


def resume(ctx: SessionContext, model: InteractionDataModel) -> Tuple[SessionContext, bool]:
    """Continue the originating session's record, if it was allowed to save one.

    No stored record means the originating session opted out, so this one
    never samples either.
    """
    last = model.get_current()
    if not last:
        return replace(ctx, sampling_enabled=False, samples_being_stored=False), False

    try:
        start_time = parse_local_timestamp(last["local_timestamp"])
    except (KeyError, TypeError, ValueError):
        logger.warning("stored interaction data has no usable local_timestamp, restarting the clock")
        start_time = now_ms()

    return replace(
        ctx,
        start_time=start_time,
        sampling_enabled=True,
        samples_being_stored=True,
        initial_kpis=None,
        initial_event_stream=None,
    ), True
