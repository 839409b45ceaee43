"""Durable storage backends for the current interaction data record.

Every backend holds at most one record (a JSON-compatible dict) and hands out
private copies, so callers always go through load -> mutate -> save.
"""
from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from typing import Optional

import redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from interaction_data.models.tables import InteractionDataSlot

logger = logging.getLogger(__name__)

CURRENT_SLOT = "current"

# What a backend raises when the store is unreachable or a value cannot be
# encoded (json.dumps raises TypeError).
STORAGE_ERRORS = (redis.RedisError, SQLAlchemyError, OSError, TypeError)


class KPIStorage(ABC):
    name: str

    @abstractmethod
    def load(self) -> Optional[dict]:
        ...

    @abstractmethod
    def save(self, record: dict) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class MemoryStorage(KPIStorage):
    """Process-local storage. Survives for the lifetime of the object only."""
    name = "memory"

    def __init__(self, record: Optional[dict] = None):
        self._record = copy.deepcopy(record)

    def load(self) -> Optional[dict]:
        return copy.deepcopy(self._record)

    def save(self, record: dict) -> None:
        self._record = copy.deepcopy(record)

    def clear(self) -> None:
        self._record = None


class SQLStorage(KPIStorage):
    name = "sql"

    def __init__(self, session_factory: Optional[sessionmaker] = None, slot: str = CURRENT_SLOT):
        if session_factory is None:
            from interaction_data.infrastructure import db
            session_factory = db.get_session_factory()
        self.session_factory = session_factory
        self.slot = slot

    def load(self) -> Optional[dict]:
        session: Session = self.session_factory()
        try:
            row = session.get(InteractionDataSlot, self.slot)
            return copy.deepcopy(row.payload) if row else None
        finally:
            session.close()

    def save(self, record: dict) -> None:
        session: Session = self.session_factory()
        try:
            row = session.get(InteractionDataSlot, self.slot)
            if row is None:
                session.add(InteractionDataSlot(slot=self.slot, payload=copy.deepcopy(record)))
            else:
                row.payload = copy.deepcopy(record)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def clear(self) -> None:
        session: Session = self.session_factory()
        try:
            session.query(InteractionDataSlot).filter(InteractionDataSlot.slot == self.slot).delete()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


class RedisStorage(KPIStorage):
    name = "redis"

    def __init__(self, client: Optional[redis.Redis] = None, key: str = "interaction_data:current", url: Optional[str] = None):
        if client is None:
            if url is None:
                from interaction_data.config import get_settings
                url = get_settings().redis_url
            client = redis.Redis.from_url(url)
        self.client = client
        self.key = key

    def load(self) -> Optional[dict]:
        raw = self.client.get(self.key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("discarding unreadable interaction data under %s", self.key)
            return None

    def save(self, record: dict) -> None:
        self.client.set(self.key, json.dumps(record))

    def clear(self) -> None:
        self.client.delete(self.key)
