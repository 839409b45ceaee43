"""Durable interaction data model: the single stored record and its upload."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from prometheus_client import Counter

from interaction_data.storage.backends import KPIStorage

logger = logging.getLogger(__name__)

PUBLISH_ATTEMPTS = Counter('interaction_data_publish_total', 'Attempts to publish the stored interaction data', ['result'])


class InteractionDataModel:
    def __init__(self, storage: KPIStorage, network):
        self.storage = storage
        self.network = network

    def get_current(self) -> Optional[dict]:
        return self.storage.load()

    def set_current(self, record: dict) -> None:
        self.storage.save(record)

    def push(self, record: dict) -> None:
        """Seed the durable slot with a new session's record."""
        if self.storage.load() is not None:
            logger.warning("replacing unpublished interaction data in %s storage", self.storage.name)
        self.storage.save(record)

    def clear_current(self) -> None:
        self.storage.clear()

    def publish_current(self, done: Optional[Callable[[bool], None]] = None) -> None:
        """Send the stored record, then clear the slot whatever the outcome.

        ``done(success)`` is called last. Nothing stored means ``done(False)``
        without any request.
        """
        success = False
        try:
            current = self.storage.load()
        except Exception as e:  # noqa
            logger.warning("could not read stored interaction data: %s", e)
            current = None

        if current:
            try:
                success = bool(self.network.send_interaction_data([current]))
            except Exception as e:  # noqa
                logger.warning("interaction data send raised: %s", e)
            PUBLISH_ATTEMPTS.labels('sent' if success else 'failed').inc()
            try:
                self.storage.clear()
            except Exception as e:  # noqa
                logger.error("could not clear stored interaction data: %s", e)
        else:
            PUBLISH_ATTEMPTS.labels('empty').inc()

        if done:
            done(success)
