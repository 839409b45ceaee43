"""Dialog bootstrap for the interaction data collector."""
from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urlsplit

from interaction_data.config import Settings, get_settings
from interaction_data.mediator import Mediator
from interaction_data.messages import Message
from interaction_data.module import InteractionData
from interaction_data.network import Network
from interaction_data.session import Environment
from interaction_data.storage import InteractionDataModel, MemoryStorage, RedisStorage, SQLStorage

logger = logging.getLogger(__name__)

AUTH_RETURN_MARKER = "AUTH_RETURN"


def is_continuation(location: str) -> bool:
    """A page reached with ``#AUTH_RETURN`` is returning from the user's IdP."""
    return AUTH_RETURN_MARKER in (urlsplit(location or "").fragment or "")


def build_storage(settings: Optional[Settings] = None):
    s = settings or get_settings()
    backend = (s.store_backend or "memory").lower()
    if backend == "sql":
        from interaction_data.infrastructure.db import init_db
        init_db()
        return SQLStorage()
    if backend == "redis":
        return RedisStorage(url=s.redis_url, key=s.redis_store_key)
    if backend != "memory":
        logger.warning("unknown STORE_BACKEND '%s', using memory", backend)
    return MemoryStorage()


def build_model(settings: Optional[Settings] = None, network: Optional[Network] = None) -> InteractionDataModel:
    return InteractionDataModel(build_storage(settings), network or Network())


def start_dialog(
    location: str,
    mediator: Optional[Mediator] = None,
    model: Optional[InteractionDataModel] = None,
    network: Optional[Network] = None,
    environment: Optional[Environment] = None,
    dom_loading: Optional[Any] = None,
    **module_kwargs,
) -> InteractionData:
    """Start interaction data collection for a dialog page load."""
    mediator = mediator or Mediator()
    network = network or (model.network if model is not None else Network())
    model = model or build_model(network=network)

    module = InteractionData(mediator, model, network, environment=environment, **module_kwargs)
    module.start(continuation=is_continuation(location))

    # DOM loading time is only known when the server is configured to send it.
    if dom_loading:
        mediator.publish(Message.DOM_LOADING, {"eventTime": dom_loading})

    return module
