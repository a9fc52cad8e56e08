"""HTTP route smoke tests using FastAPI's TestClient.

The database is replaced by the in-memory MockVisitRepository from
test_engine and an AsyncMock session, so these tests exercise routing,
identity headers and error mapping without PostgreSQL.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from awv_server.app import create_app
from awv_server.config import ServerSettings
from awv_server.dependencies import get_db
from awv_server.errors import classify_value_error

from helpers.builders import TEMPLATE_DIR
from test_engine import MockVisitRepository

HEADERS = {"X-User-ID": "provider-1"}


async def _mock_db():
    yield AsyncMock()


def _client(**settings):
    app = create_app(ServerSettings(template_dir=str(TEMPLATE_DIR), **settings))
    app.dependency_overrides[get_db] = _mock_db
    return TestClient(app)


@pytest.fixture
def client():
    with _client() as c:
        c.app.state.engine._repo = MockVisitRepository()
        yield c


def _create(client, visit_id="v1"):
    return client.post("/api/v1/visits", headers=HEADERS, json={
        "visit_id": visit_id,
        "patient_id": "p1",
        "template_id": "awv-standard",
    })


# =====================================================================
# Identity & templates
# =====================================================================


def test_missing_user_header_is_401(client):
    assert client.get("/api/v1/visits").status_code == 401


def test_proxy_secret_enforced():
    """With a trusted proxy secret configured, a wrong secret is 403."""
    with _client(trusted_proxy_secret="s3cret") as c:
        bad = c.get("/api/v1/templates", headers={**HEADERS, "X-Proxy-Secret": "nope"})
        good = c.get("/api/v1/templates", headers={**HEADERS, "X-Proxy-Secret": "s3cret"})
    assert bad.status_code == 403
    assert good.status_code == 200


def test_list_and_get_templates(client):
    listing = client.get("/api/v1/templates", headers=HEADERS)
    assert listing.status_code == 200
    assert [t["id"] for t in listing.json()] == ["awv-standard"]

    detail = client.get("/api/v1/templates/awv-standard", headers=HEADERS)
    assert detail.status_code == 200
    assert len(detail.json()["sections"]) == 8


def test_unknown_template_is_404(client):
    assert client.get("/api/v1/templates/nope", headers=HEADERS).status_code == 404


# =====================================================================
# Visits
# =====================================================================


def test_create_visit_and_duplicate(client):
    first = _create(client)
    assert first.status_code == 201
    assert first.json()["status"] == "scheduled"
    assert _create(client).status_code == 409


def test_missing_visit_is_404_with_safe_message(client):
    resp = client.get("/api/v1/visits/ghost", headers=HEADERS)
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Resource not found"}, "Internal ids must not leak"


def test_conduct_flow(client):
    """Record, advance with skip logic, and read the step back."""
    _create(client)
    step = client.post("/api/v1/visits/v1/responses", headers=HEADERS, json={
        "answers": {"has_chronic_conditions": "no"},
    }).json()
    assert step["type"] == "section"
    assert step["section_id"] == "health-history"

    step = client.post("/api/v1/visits/v1/advance", headers=HEADERS).json()
    assert step["section_id"] == "vitals", "chronic-conditions must be skipped"

    step = client.post("/api/v1/visits/v1/advance", headers=HEADERS).json()
    assert step["section_id"] == "vitals"
    assert set(step["errors"]) == {"vital_signs", "bmi"}

    step = client.post("/api/v1/visits/v1/retreat", headers=HEADERS).json()
    assert step["section_id"] == "health-history"


def test_save_and_fetch_responses(client):
    _create(client)
    answers = {"has_chronic_conditions": "yes", "conditions": ["diabetes"]}
    saved = client.put("/api/v1/visits/v1", headers=HEADERS, json={"responses": answers})
    assert saved.status_code == 200
    assert saved.json()["status"] == "in_progress"

    fetched = client.get("/api/v1/visits/v1/responses", headers=HEADERS).json()
    assert fetched["responses"] == answers


def test_invalid_status_is_400(client):
    _create(client)
    resp = client.put("/api/v1/visits/v1", headers=HEADERS, json={"status": "paused"})
    assert resp.status_code == 400


def test_recommendation_preview_grouped(client):
    _create(client)
    client.post("/api/v1/visits/v1/responses", headers=HEADERS, json={
        "answers": {"screenings_due": ["mammogram"], "tobacco_use": "yes"},
    })
    grouped = client.get(
        "/api/v1/visits/v1/recommendations", headers=HEADERS, params={"grouped": "true"},
    ).json()
    assert list(grouped) == ["Preventive Care", "Lifestyle"]


# =====================================================================
# Error mapping
# =====================================================================


@pytest.mark.parametrize("message, status", [
    ("Visit 'v1' already exists", 409),
    ("Visit not found: user_id=u, visit_id=v", 404),
    ("Recommendation 'x' not found for visit 'v'", 404),
    ("Invalid status 'paused'; expected one of: scheduled", 400),
    ("Cannot complete visit: 2 section(s) remain after section 3", 400),
    ("something else entirely", 400),
])
def test_classify_value_error(message, status):
    assert classify_value_error(ValueError(message))[0] == status


def test_complete_with_sections_remaining_is_400(client):
    _create(client)
    resp = client.post("/api/v1/visits/v1/complete", headers=HEADERS)
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Operation not allowed for this visit"}
