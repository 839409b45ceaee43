from __future__ import annotations
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Event tuple layout: [reporting_name, offset_ms, duration_ms?, repeat_count?]
EventTuple = List[Any]

NAME_INDEX = 0
OFFSET_INDEX = 1
REPEAT_COUNT_INDEX = 3

TEN_MINS_IN_MS = 10 * 60 * 1000


class ScreenSize(BaseModel):
    width: int
    height: int


class SessionContextInfo(BaseModel):
    """Session values handed out by the server on ``session_context``."""
    model_config = ConfigDict(extra="allow")

    data_sample_rate: float = Field(0.0, ge=0.0, le=1.0)
    server_time: int
    csrf_token: Optional[str] = None

    @field_validator("data_sample_rate", mode="before")
    @classmethod
    def _missing_rate_is_zero(cls, v):
        return 0.0 if v is None else v


class KPIRecord(BaseModel):
    """One logical dialog session's accumulated interaction data.

    Extra keys merged in through ``kpi_data`` are kept as-is.
    """
    model_config = ConfigDict(extra="allow")

    event_stream: List[EventTuple] = Field(default_factory=list)
    sample_rate: Optional[float] = None
    timestamp: Optional[int] = None
    local_timestamp: Optional[str] = None
    lang: Optional[str] = None
    screen_size: Optional[ScreenSize] = None
    new_account: bool = False

    @field_validator("event_stream")
    @classmethod
    def _check_tuples(cls, v: List[EventTuple]) -> List[EventTuple]:
        for event in v:
            if len(event) < 2 or len(event) > 4:
                raise ValueError("event tuple must have 2 to 4 entries")
            if not isinstance(event[NAME_INDEX], str):
                raise ValueError("event name must be a string")
            if isinstance(event[OFFSET_INDEX], bool) or not isinstance(event[OFFSET_INDEX], (int, float)):
                raise ValueError("event offset must be a number")
        return v


class InteractionDataSubmission(BaseModel):
    data: List[KPIRecord]
    csrf: Optional[str] = None


def round_to_bucket(epoch_ms: int, bucket_ms: int = TEN_MINS_IN_MS) -> int:
    """Round down to the previous bucket boundary (10 minutes by default)."""
    return (int(epoch_ms) // bucket_ms) * bucket_ms
