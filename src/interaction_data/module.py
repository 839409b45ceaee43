"""Interaction data collection for the dialog.

Collects anonymous data about how a user moves through the dialog: which
screens are shown, which network requests complete, how long steps take. No
user specific information is kept. The record of one dialog session is stored
durably and reported to the server when the next dialog session starts.

A session decides once, from the server's sample rate, whether it collects at
all. Events seen before that decision are buffered in memory; if the session
is sampled they seed the durable record, otherwise they are discarded.

A continuation (the page was rebuilt after a redirect to the user's IdP)
resumes the record the originating session left behind instead of deciding
again.
"""
from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional

from interaction_data import bridge
from interaction_data.config import get_settings
from interaction_data.continuation import resume
from interaction_data.mediator import Mediator
from interaction_data.messages import Message
from interaction_data.models.kpi import REPEAT_COUNT_INDEX, EventTuple, SessionContextInfo
from interaction_data.recorder import record_event
from interaction_data.sampling import begin_sampling
from interaction_data.session import Environment, SessionContext, now_ms
from interaction_data.storage import STORAGE_ERRORS, InteractionDataModel
from interaction_data.translation import DEFAULT_NAME_TABLE, build_name_table

logger = logging.getLogger(__name__)


class InteractionData:
    REPEAT_COUNT_INDEX = REPEAT_COUNT_INDEX

    def __init__(
        self,
        mediator: Mediator,
        model: InteractionDataModel,
        network,
        environment: Optional[Environment] = None,
        clock: Callable[[], int] = now_ms,
        rng: Callable[[], float] = random.random,
    ):
        self.mediator = mediator
        self.model = model
        self.network = network
        self.environment = environment or Environment()
        self.clock = clock
        self.rng = rng
        self.context: Optional[SessionContext] = None
        self._name_table = DEFAULT_NAME_TABLE
        self._subscriptions: list[int] = []

    @property
    def sampling_enabled(self) -> Optional[bool]:
        return self.context.sampling_enabled if self.context else None

    @property
    def start_time(self) -> Optional[int]:
        return self.context.start_time if self.context else None

    def start(self, continuation: bool = False, sampling_enabled: Optional[bool] = None) -> None:
        """Begin collecting for this page load.

        ``sampling_enabled`` pre-decides sampling (tests); it is ignored for a
        continuation, whose originating session already decided.
        """
        strict = get_settings().strict_event_names

        if continuation:
            ctx = SessionContext(
                start_time=self.clock(),
                sampling_enabled=sampling_enabled,
                name_table=self._name_table,
                strict_event_names=strict,
            )
            try:
                self.context, resumed = resume(ctx, self.model)
            except STORAGE_ERRORS as e:
                self.context = ctx
                self._storage_failed("resume", e)
                return
            if not resumed:
                logger.info("continuation without stored interaction data, not sampling")
                return
        else:
            # Default start time; overridden by a start_time message
            self.context = SessionContext.new(
                self.clock(),
                sampling_enabled=sampling_enabled,
                name_table=self._name_table,
                strict_event_names=strict,
            )
            # Publish outstanding data right away, before deciding for this session.
            self.publish_current()

        self._subscriptions.append(self.mediator.subscribe_all(self.add_event))
        self._subscriptions.append(self.mediator.subscribe(Message.KPI_DATA, self._on_kpi_data))

    def stop(self) -> None:
        for token in self._subscriptions:
            self.mediator.unsubscribe(token)
        self._subscriptions = []

    def publish_current(self, done: Optional[Callable[[bool], None]] = None) -> None:
        """Publish the previous session's record, then begin sampling.

        Previous data is published whether or not this session samples: the
        originating session already decided. Sampling only begins once the
        previous record is sent and scrubbed.
        """
        def on_published(status: bool) -> None:
            def on_context(info: SessionContextInfo) -> None:
                self._begin_sampling(info)
                self.mediator.publish(Message.SEND_COMPLETE if status else Message.SEND_ERROR)
                if done:
                    done(status)

            self.network.with_context(on_context)

        bridge.publish_previous(self.model, on_published)

    def _begin_sampling(self, info: SessionContextInfo) -> None:
        if self.context is None:
            return
        try:
            self.context = begin_sampling(self.context, self.model, info, self.environment, self.rng)
        except STORAGE_ERRORS as e:
            self._storage_failed("begin sampling", e)

    def _storage_failed(self, action: str, error: Exception) -> None:
        logger.warning("interaction data store failed during %s, disabling collection: %s", action, error)
        self.context = replace(
            self.context,
            sampling_enabled=False,
            samples_being_stored=False,
            initial_kpis=None,
            initial_event_stream=None,
        )

    def add_event(self, msg: str, data: Any = None) -> Optional[EventTuple]:
        if self.context is None:
            return None
        try:
            self.context, event = record_event(self.context, self.model, msg, data, now=self.clock())
        except STORAGE_ERRORS as e:
            self._storage_failed("add_event", e)
            return None
        return event

    def _on_kpi_data(self, msg: str, kpi_data: Any) -> None:
        if isinstance(kpi_data, Mapping):
            self.add_kpi_data(kpi_data)

    def add_kpi_data(self, kpi_data: Mapping[str, Any]) -> None:
        # current data is None if sampling is disabled
        current = self.get_current_kpis()
        if current is not None:
            current.update(kpi_data)
            try:
                self.context = bridge.set_current_kpis(self.context, self.model, current)
            except STORAGE_ERRORS as e:
                self._storage_failed("add_kpi_data", e)

    def get_current_kpis(self) -> Optional[dict]:
        if self.context is None:
            return None
        try:
            return bridge.get_current_kpis(self.context, self.model)
        except STORAGE_ERRORS as e:
            self._storage_failed("get_current_kpis", e)
            return None

    def get_current_event_stream(self) -> Optional[list[EventTuple]]:
        if self.context is None:
            return None
        try:
            return bridge.get_current_event_stream(self.context, self.model)
        except STORAGE_ERRORS as e:
            self._storage_failed("get_current_event_stream", e)
            return None

    # test API

    def set_name_table(self, table: Mapping[str, Any]) -> None:
        self._name_table = build_name_table(table)
        if self.context is not None:
            self.context = replace(self.context, name_table=self._name_table)

    def enable(self) -> None:
        if self.context is not None:
            self.context = replace(self.context, sampling_enabled=True)

    def disable(self) -> None:
        if self.context is not None:
            self.context = replace(self.context, sampling_enabled=False)
