"""One-time, per-session sampling decision."""
from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Callable, Optional

from prometheus_client import Counter

from interaction_data.models.kpi import SessionContextInfo, round_to_bucket
from interaction_data.session import Environment, SessionContext, format_local_timestamp
from interaction_data.storage.model import InteractionDataModel

logger = logging.getLogger(__name__)

SAMPLING_DECISIONS = Counter('interaction_sampling_decisions_total', 'Sampling decisions taken', ['outcome'])


def draw(sample_rate: float, rng: Callable[[], float] = random.random) -> bool:
    """Weighted coin: rate 0 never samples, rate 1 always does."""
    return sample_rate > 0 and rng() <= sample_rate


def begin_sampling(
    ctx: SessionContext,
    model: InteractionDataModel,
    info: SessionContextInfo,
    environment: Optional[Environment] = None,
    rng: Callable[[], float] = random.random,
) -> SessionContext:
    """Decide whether this session samples and, if so, seed the durable record.

    A decision already present on ``ctx`` is kept. Once the record is durable
    the call has no effect.
    """
    if ctx.samples_being_stored:
        return ctx

    sample_rate = info.data_sample_rate or 0

    if ctx.sampling_enabled is None:
        ctx = replace(ctx, sampling_enabled=draw(sample_rate, rng))
        SAMPLING_DECISIONS.labels('sampled' if ctx.sampling_enabled else 'skipped').inc()
        logger.debug("sampling decision at rate %s: %s", sample_rate, ctx.sampling_enabled)

    if not ctx.sampling_enabled:
        return replace(ctx, initial_kpis=None, initial_event_stream=None)

    # The promise to users is a 10 minute resolution on the server timestamp.
    environment = environment or Environment()
    record = dict(ctx.initial_kpis or {})
    record.update(
        event_stream=list(ctx.initial_event_stream or []),
        sample_rate=sample_rate,
        timestamp=round_to_bucket(info.server_time),
        local_timestamp=format_local_timestamp(ctx.start_time),
        lang=environment.lang or None,
        # overridden through kpi_data when an account is created
        new_account=False,
    )
    if environment.screen is not None:
        record["screen_size"] = environment.screen.model_dump()

    # Published when the next dialog session starts.
    model.push(record)

    return replace(ctx, initial_kpis=None, initial_event_stream=None, samples_being_stored=True)
