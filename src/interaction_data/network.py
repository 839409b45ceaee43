"""HTTP transport to the dialog backend: session context and upload."""
from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Optional

import requests
from prometheus_client import Counter, Histogram
from pydantic import ValidationError

from interaction_data.config import get_settings
from interaction_data.models.kpi import SessionContextInfo
from interaction_data.session import now_ms

logger = logging.getLogger(__name__)

NETWORK_REQUESTS = Counter('interaction_network_requests_total', 'Requests made to the dialog backend', ['endpoint', 'result'])
NETWORK_LATENCY = Histogram('interaction_network_latency_seconds', 'Latency of dialog backend requests', ['endpoint'], buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10))


class Network:
    """Best-effort client. Failures are logged and reported, never raised."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], int] = now_ms,
    ):
        s = get_settings()
        self.base_url = (base_url or s.network_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else s.network_timeout_seconds
        self.session_context_path = s.session_context_path
        self.interaction_data_path = s.interaction_data_path
        self.session = session or requests.Session()
        self.clock = clock
        self._context: Optional[SessionContextInfo] = None

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def session_context(self) -> SessionContextInfo:
        """Fetch session context once; later calls return the cached value.

        An unreachable or malformed response yields a zero sample rate, so the
        session decides not to sample rather than buffering forever.
        """
        if self._context is not None:
            return self._context
        start = time.time()
        try:
            resp = self.session.get(self._url(self.session_context_path), timeout=self.timeout)
            resp.raise_for_status()
            self._context = SessionContextInfo.model_validate(resp.json())
            NETWORK_REQUESTS.labels('session_context', 'ok').inc()
        except (requests.RequestException, ValueError, ValidationError) as e:
            NETWORK_REQUESTS.labels('session_context', 'error').inc()
            logger.warning("session_context fetch failed: %s", e)
            self._context = SessionContextInfo(data_sample_rate=0.0, server_time=self.clock())
        finally:
            NETWORK_LATENCY.labels('session_context').observe(time.time() - start)
        return self._context

    def with_context(self, callback: Callable[[SessionContextInfo], None]) -> None:
        callback(self.session_context())

    def send_interaction_data(self, records: Iterable[dict]) -> bool:
        payload = {"data": list(records)}
        if self._context is not None and self._context.csrf_token:
            payload["csrf"] = self._context.csrf_token
        start = time.time()
        try:
            resp = self.session.post(self._url(self.interaction_data_path), json=payload, timeout=self.timeout)
            resp.raise_for_status()
            NETWORK_REQUESTS.labels('interaction_data', 'ok').inc()
            return True
        except requests.RequestException as e:
            NETWORK_REQUESTS.labels('interaction_data', 'error').inc()
            logger.warning("interaction_data upload failed: %s", e)
            return False
        finally:
            NETWORK_LATENCY.labels('interaction_data').observe(time.time() - start)
