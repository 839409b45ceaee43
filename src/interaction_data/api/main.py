"""Collection service for dialog interaction data."""
from __future__ import annotations
import time
from fastapi import FastAPI, Request, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from interaction_data.api.interaction import router as interaction_router
from interaction_data.api.registry import registry
from interaction_data.infrastructure.db import healthcheck, init_db

REQUESTS = Counter('api_requests_total', 'API Requests', ['endpoint'], registry=registry)
LATENCY = Histogram('api_request_latency_seconds', 'API request latency', ['endpoint'], registry=registry, buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5))

app = FastAPI(title="Interaction Data Collector")
app.include_router(interaction_router)


@app.on_event("startup")
def _startup():
    init_db()


@app.middleware("http")
async def _instrument(request: Request, call_next):
    start = time.time()
    endpoint = request.url.path
    try:
        return await call_next(request)
    finally:
        REQUESTS.labels(endpoint).inc()
        LATENCY.labels(endpoint).observe(time.time() - start)


@app.get("/health")
def health():
    return {"db": healthcheck(), "status": "ok"}


@app.get("/metrics")
def metrics():
    data = generate_latest(registry)
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
