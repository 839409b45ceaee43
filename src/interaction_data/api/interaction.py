from __future__ import annotations
import logging
import secrets
import time
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from prometheus_client import Counter
from interaction_data.config import get_settings
from interaction_data.infrastructure import db
from interaction_data.models.kpi import InteractionDataSubmission, SessionContextInfo
from interaction_data.models.tables import InteractionRecord
from interaction_data.api.registry import registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wsapi", tags=["interaction_data"])

RECORDS_RECEIVED = Counter('interaction_records_received_total', 'KPI records accepted by the collection endpoint', registry=registry)


def get_db():
    session = db.get_session_factory()()
    try:
        yield session
    finally:
        session.close()


@router.get("/session_context", response_model=SessionContextInfo)
def session_context():
    settings = get_settings()
    return SessionContextInfo(
        data_sample_rate=settings.data_sample_rate,
        server_time=int(time.time() * 1000),
        csrf_token=secrets.token_urlsafe(16),
    )


@router.post("/interaction_data")
def interaction_data(submission: InteractionDataSubmission, session: Session = Depends(get_db)):
    rows = []
    for record in submission.data:
        payload = record.model_dump(mode="json")
        rows.append(InteractionRecord(
            timestamp=record.timestamp,
            sample_rate=record.sample_rate,
            lang=record.lang,
            new_account=record.new_account,
            event_count=len(record.event_stream),
            payload=payload,
        ))
    try:
        session.add_all(rows)
        session.commit()
    except Exception:
        session.rollback()
        raise
    RECORDS_RECEIVED.inc(len(rows))
    logger.info("accepted %d interaction data record(s)", len(rows))
    return {"success": True, "accepted": len(rows)}
