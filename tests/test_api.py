import pytest
from fastapi.testclient import TestClient

from interaction_data.config import reset_settings
from interaction_data.infrastructure import db
from interaction_data.models.tables import InteractionRecord


@pytest.fixture
def client(sqlite_engine, monkeypatch):
    monkeypatch.setenv("DATA_SAMPLE_RATE", "0.5")
    reset_settings()
    previous = db.engine
    db.override_engine(sqlite_engine)
    from interaction_data.api.main import app
    yield TestClient(app)
    db.override_engine(previous)


RECORD = {
    "event_stream": [["screen.authenticate", 12], ["xhr_complete.GET/wsapi/session_context", 40, None, 3]],
    "sample_rate": 0.5,
    "timestamp": 1_699_999_800_000,
    "local_timestamp": "2023-11-14T22:13:20.123+00:00",
    "lang": "en-US",
    "screen_size": {"width": 1024, "height": 768},
    "new_account": True,
    "number_emails": 2,
}


def test_session_context(client):
    resp = client.get("/wsapi/session_context")
    assert resp.status_code == 200
    body = resp.json()
    assert body["data_sample_rate"] == 0.5
    assert isinstance(body["server_time"], int)
    assert body["csrf_token"]


def test_interaction_data_is_persisted(client, sqlite_engine):
    resp = client.post("/wsapi/interaction_data", json={"data": [RECORD], "csrf": "tok"})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "accepted": 1}

    session = db.SessionLocal()
    try:
        rows = session.query(InteractionRecord).all()
    finally:
        session.close()
    assert len(rows) == 1
    row = rows[0]
    assert row.timestamp == RECORD["timestamp"]
    assert row.event_count == 2
    assert row.new_account is True
    assert row.payload["number_emails"] == 2
    assert row.payload["event_stream"][1] == ["xhr_complete.GET/wsapi/session_context", 40, None, 3]


@pytest.mark.parametrize("body", [
    {"data": [{"event_stream": [[1, 2]]}]},
    {"data": [{"event_stream": [["a"]]}]},
    {"data": [{"event_stream": [["a", "soon"]]}]},
    {"records": []},
])
def test_malformed_submission_is_rejected(client, body):
    assert client.post("/wsapi/interaction_data", json=body).status_code == 422


def test_health_and_metrics(client):
    assert client.get("/health").json() == {"db": True, "status": "ok"}
    client.post("/wsapi/interaction_data", json={"data": [RECORD]})
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "interaction_records_received_total" in metrics.text
