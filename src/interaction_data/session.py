"""Per-session state of the collector.

The state is an immutable value: operations take a ``SessionContext`` and
return an updated copy, so nothing outside the owning module can mutate it.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from interaction_data.models.kpi import EventTuple, ScreenSize
from interaction_data.translation import DEFAULT_NAME_TABLE, NameTable


def now_ms() -> int:
    return int(time.time() * 1000)


def to_epoch_ms(value: Any) -> int:
    """Accept epoch milliseconds or a datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.astimezone()
        return int(round(value.timestamp() * 1000))
    return int(value)


def format_local_timestamp(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000).astimezone().isoformat(timespec="milliseconds")


def parse_local_timestamp(raw: str) -> int:
    return to_epoch_ms(datetime.fromisoformat(raw))


@dataclass(frozen=True)
class Environment:
    """What the page knows about itself: document language and screen."""
    lang: Optional[str] = None
    screen: Optional[ScreenSize] = None


@dataclass(frozen=True)
class SessionContext:
    start_time: int
    # None until decided, then fixed for the session
    sampling_enabled: Optional[bool] = None
    # True once the record lives in the durable store
    samples_being_stored: bool = False
    initial_kpis: Optional[dict] = None
    initial_event_stream: Optional[list[EventTuple]] = None
    name_table: NameTable = field(default_factory=lambda: DEFAULT_NAME_TABLE)
    strict_event_names: bool = False

    @classmethod
    def new(cls, start_time: int, sampling_enabled: Optional[bool] = None, **kwargs) -> "SessionContext":
        """Fresh, non-continuation session with empty pre-decision buffers."""
        return cls(
            start_time=start_time,
            sampling_enabled=sampling_enabled,
            samples_being_stored=False,
            initial_kpis={},
            initial_event_stream=[],
            **kwargs,
        )
