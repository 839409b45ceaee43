"""In-process message bus shared by the dialog modules."""
from __future__ import annotations

import itertools
import logging
from collections import defaultdict
from typing import Any, Callable

from interaction_data.messages import Message, message_name

logger = logging.getLogger(__name__)

Handler = Callable[[str, Any], None]

WILDCARD = "*"


class Mediator:
    """Topic routed pub/sub. Handlers run synchronously, in subscription order."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[tuple[int, Handler]]] = defaultdict(list)
        self._ids = itertools.count(1)

    def subscribe(self, msg: str | Message, handler: Handler) -> int:
        token = next(self._ids)
        self._subscribers[message_name(msg)].append((token, handler))
        return token

    def subscribe_all(self, handler: Handler) -> int:
        """Subscribe a handler to every message."""
        return self.subscribe(WILDCARD, handler)

    def unsubscribe(self, token: int) -> bool:
        for topic, handlers in self._subscribers.items():
            for i, (t, _) in enumerate(handlers):
                if t == token:
                    del handlers[i]
                    return True
        return False

    def publish(self, msg: str | Message, data: Any = None) -> None:
        name = message_name(msg)
        handlers = list(self._subscribers.get(name, []))
        if name != WILDCARD:
            handlers.extend(self._subscribers.get(WILDCARD, []))
        for _, handler in handlers:
            try:
                handler(name, data)
            except Exception as exc:
                logger.error("mediator handler failed for '%s': %s", name, exc)
