"""Shared pytest fixtures."""
from __future__ import annotations

import pytest
import redis
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from interaction_data.config import reset_settings
from interaction_data.infrastructure.db import init_db
from interaction_data.mediator import Mediator
from interaction_data.models.kpi import SessionContextInfo
from interaction_data.module import InteractionData
from interaction_data.storage import InteractionDataModel, MemoryStorage


class FakeClock:
    def __init__(self, now: int = 1_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FailingStorage(MemoryStorage):
    """Memory storage that raises like an unreachable Redis while ``failing`` is set."""
    name = "failing"

    def __init__(self, record=None, failing: bool = True):
        super().__init__(record)
        self.failing = failing

    def _check(self) -> None:
        if self.failing:
            raise redis.ConnectionError("store down")

    def load(self):
        self._check()
        return super().load()

    def save(self, record):
        self._check()
        super().save(record)

    def clear(self):
        self._check()
        super().clear()


class FakeNetwork:
    """Stands in for the dialog backend. ``deferred`` holds session context back."""

    def __init__(self, data_sample_rate: float = 1.0, server_time: int = 1_000_003, send_result=True):
        self.info = SessionContextInfo(data_sample_rate=data_sample_rate, server_time=server_time)
        self.send_result = send_result
        self.deferred = False
        self.pending = []
        self.sent = []
        self.context_requests = 0

    def set_context(self, data_sample_rate: float, server_time: int = 1_000_003) -> None:
        self.info = SessionContextInfo(data_sample_rate=data_sample_rate, server_time=server_time)

    def with_context(self, callback) -> None:
        self.context_requests += 1
        if self.deferred:
            self.pending.append(callback)
        else:
            callback(self.info)

    def deliver_context(self) -> None:
        pending, self.pending = self.pending, []
        for callback in pending:
            callback(self.info)

    def send_interaction_data(self, records) -> bool:
        records = list(records)
        self.sent.append(records)
        if isinstance(self.send_result, Exception):
            raise self.send_result
        return self.send_result


@pytest.fixture(autouse=True)
def _reset_settings(monkeypatch):
    monkeypatch.setenv("APP_ENV", "test")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def model(storage, network) -> InteractionDataModel:
    return InteractionDataModel(storage, network)


@pytest.fixture
def mediator() -> Mediator:
    return Mediator()


@pytest.fixture
def make_module(mediator, model, clock):
    def _make(**kwargs) -> InteractionData:
        kwargs.setdefault("rng", lambda: 0.5)
        return InteractionData(mediator, model, model.network, clock=clock, **kwargs)
    return _make


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def failing_storage() -> FailingStorage:
    return FailingStorage()
