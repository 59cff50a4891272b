import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.services.container import build_services
from app.services.kv_store import InMemoryKeyValueStore

from conftest import case_draft, document_draft

API = "/api/v1"


@pytest.fixture
def client():
    async def services_factory():
        return await build_services(
            store=InMemoryKeyValueStore(),
            secure_store=InMemoryKeyValueStore(),
            reminders_enabled=False,
        )

    with TestClient(create_app(services_factory)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    response = client.post(f"{API}/auth/login", json={"email": "ali.khan@lawfirm.pk", "password": "password123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


# ============================================================================
# Auth
# ============================================================================

def test_login_returns_token_and_user(client):
    response = client.post(f"{API}/auth/login", json={"email": "ali.khan@lawfirm.pk", "password": "password123"})

    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "ali.khan@lawfirm.pk"
    assert body["user"]["teamId"] == "team1"


def test_login_with_wrong_password(client):
    response = client.post(f"{API}/auth/login", json={"email": "ali.khan@lawfirm.pk", "password": "nope"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_biometric_login_unavailable(client):
    response = client.post(f"{API}/auth/biometric")
    assert response.status_code == 401


def test_protected_routes_require_live_token(client, auth_headers):
    assert client.get(f"{API}/cases/").status_code == 401
    assert client.get(f"{API}/cases/", headers={"Authorization": "Bearer forged"}).status_code == 401
    assert client.get(f"{API}/auth/me", headers=auth_headers).json()["id"] == "1"

    assert client.post(f"{API}/auth/logout").status_code == 200
    assert client.get(f"{API}/auth/me", headers=auth_headers).status_code == 401
    assert client.get(f"{API}/auth/session").json()["authenticated"] is False


def test_session_status_does_not_expose_profile(client, auth_headers):
    body = client.get(f"{API}/auth/session").json()

    assert body == {"authenticated": True}


# ============================================================================
# Cases
# ============================================================================

def test_list_and_filter_cases(client, auth_headers):
    cases = client.get(f"{API}/cases/", headers=auth_headers).json()
    assert [c["caseNumber"] for c in cases] == ["CIV/2024/001", "CRM/2024/002"]

    found = client.get(f"{API}/cases/", params={"q": "ahmad"}, headers=auth_headers).json()
    assert [c["id"] for c in found] == ["case2"]

    by_status = client.get(f"{API}/cases/status/active", headers=auth_headers).json()
    assert len(by_status) == 2

    assert client.get(f"{API}/cases/", params={"status": "closed"}, headers=auth_headers).status_code == 422


def test_case_lifecycle(client, auth_headers):
    created = client.post(f"{API}/cases/", json=case_draft(), headers=auth_headers)
    assert created.status_code == 201
    case_id = created.json()["id"]
    assert created.json()["hearings"] == []

    fetched = client.get(f"{API}/cases/{case_id}", headers=auth_headers)
    assert fetched.json()["caseNumber"] == "FAM/2024/010"

    updated = client.patch(f"{API}/cases/{case_id}", json={"status": "disposed"}, headers=auth_headers)
    assert updated.json()["status"] == "disposed"

    reopened = client.patch(f"{API}/cases/{case_id}", json={"status": "active"}, headers=auth_headers)
    assert reopened.status_code == 422

    assert client.delete(f"{API}/cases/{case_id}", headers=auth_headers).status_code == 200
    assert client.get(f"{API}/cases/{case_id}", headers=auth_headers).status_code == 404


def test_missing_case_is_404(client, auth_headers):
    assert client.get(f"{API}/cases/nope", headers=auth_headers).status_code == 404
    assert client.patch(f"{API}/cases/nope", json={"status": "pending"}, headers=auth_headers).status_code == 404
    assert client.delete(f"{API}/cases/nope", headers=auth_headers).status_code == 404


def test_invalid_case_body_is_422(client, auth_headers):
    response = client.post(f"{API}/cases/", json=case_draft(courtName="Moon Court"), headers=auth_headers)
    assert response.status_code == 422


# ============================================================================
# Hearings & documents
# ============================================================================

def test_hearing_endpoints(client, auth_headers):
    added = client.post(
        f"{API}/cases/case1/hearings",
        json={"date": "2030-05-10T10:00:00", "courtOrderType": "Arguments", "notes": "Final arguments"},
        headers=auth_headers,
    )
    assert added.status_code == 201
    hearing = added.json()
    assert hearing["hearingNumber"] == 2

    patched = client.patch(
        f"{API}/cases/case1/hearings/{hearing['id']}",
        json={"nextSteps": "File written arguments"},
        headers=auth_headers,
    )
    assert patched.json()["nextSteps"] == "File written arguments"
    assert patched.json()["hearingNumber"] == 2

    upcoming = client.get(f"{API}/hearings/", params={"filter": "upcoming"}, headers=auth_headers).json()
    assert hearing["id"] in [item["hearing"]["id"] for item in upcoming]

    assert client.get(f"{API}/hearings/", params={"filter": "later"}, headers=auth_headers).status_code == 422
    assert client.delete(f"{API}/cases/case1/hearings/{hearing['id']}", headers=auth_headers).status_code == 200
    assert client.delete(f"{API}/cases/case1/hearings/{hearing['id']}", headers=auth_headers).status_code == 404


def test_document_endpoints(client, auth_headers):
    added = client.post(f"{API}/cases/case2/documents", json=document_draft(type="FIR"), headers=auth_headers)
    assert added.status_code == 201
    doc_id = added.json()["id"]

    found = client.get(f"{API}/documents/", params={"type": "FIR"}, headers=auth_headers).json()
    assert [item["document"]["id"] for item in found] == [doc_id]
    assert found[0]["case"]["caseNumber"] == "CRM/2024/002"

    assert client.delete(f"{API}/cases/case2/documents/{doc_id}", headers=auth_headers).status_code == 200
    assert client.get(f"{API}/documents/", params={"type": "FIR"}, headers=auth_headers).json() == []


# ============================================================================
# Dashboard, notifications, health
# ============================================================================

def test_dashboard(client, auth_headers):
    stats = client.get(f"{API}/dashboard/stats", headers=auth_headers).json()
    assert stats["totalCases"] == 2
    assert stats["activeCases"] == 2

    report = client.get(f"{API}/dashboard/report", headers=auth_headers).json()
    assert report["casesByStatus"]["active"] == 2
    assert report["courtWise"]["High Court"]["total"] == 1

    recent = client.get(f"{API}/dashboard/recent-cases", params={"limit": 1}, headers=auth_headers).json()
    assert [c["id"] for c in recent] == ["case2"]


def test_notification_inbox(client, auth_headers):
    digest = client.post(f"{API}/notifications/digest", headers=auth_headers)
    assert digest.status_code == 200
    assert digest.json()["title"] == "Daily Digest"

    inbox = client.get(f"{API}/notifications/", headers=auth_headers).json()
    assert [n["id"] for n in inbox] == [digest.json()["id"]]
    assert client.get(f"{API}/notifications/unread-count", headers=auth_headers).json() == {"unread": 1}

    read = client.post(f"{API}/notifications/{inbox[0]['id']}/read", headers=auth_headers)
    assert read.json()["read"] is True
    assert client.post(f"{API}/notifications/missing/read", headers=auth_headers).status_code == 404

    assert client.delete(f"{API}/notifications/", headers=auth_headers).status_code == 200
    assert client.get(f"{API}/notifications/", headers=auth_headers).json() == []


def test_health(client):
    response = client.get(f"{API}/health/")

    assert response.json()["status"] == "ok"
    assert response.json()["cases_loaded"] is True
    assert response.headers["X-Request-ID"]
    assert client.get("/health").json() == {"status": "healthy"}


def test_request_id_is_echoed(client):
    response = client.get("/", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"
