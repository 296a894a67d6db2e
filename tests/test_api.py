"""HTTP-level tests against the FastAPI app with a SQLite database and a fake generation service."""

import pytest
from fastapi.testclient import TestClient

from tests.fakes import FailingKnowledgeStore, RecordingGeneration
from tyrebot.database.config.config import Settings
from tyrebot.database.core.admin_store import AdminStore
from tyrebot.main import create_app


@pytest.fixture()
def client(settings, database, generation):
    with TestClient(create_app(settings=settings, database=database, generation_service=generation)) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers(client, database):
    AdminStore(database).create_admin("admin", "Str0ng!pass", full_name="Site Admin")
    response = client.post("/api/admin/login", json={"username": "admin", "password": "Str0ng!pass"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "OK"


def test_chat_returns_reply_and_sources(client, generation, warranty_entry):
    response = client.post("/api/chat", json={"message": "What is the warranty on CEAT tyres?", "sessionId": "s1"})

    assert response.status_code == 200
    body = response.json()
    assert body["response"] == generation.reply
    assert body["sessionId"] == "s1"
    assert [source["id"] for source in body["sources"]] == [warranty_entry.id]
    assert body["sources"][0]["keywords"] == ["warranty"]


def test_chat_without_message_is_a_client_error(client, generation, conversation_store):
    response = client.post("/api/chat", json={"sessionId": "s1"})

    assert response.status_code == 400
    assert response.json() == {"error": "Message is required"}
    assert generation.calls == []
    assert conversation_store.query() == []


def test_chat_generation_failure_is_a_server_error(settings, database, conversation_store):
    failing = RecordingGeneration(error=RuntimeError("provider down"))
    with TestClient(create_app(settings=settings, database=database, generation_service=failing)) as client:
        response = client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Sorry, I encountered an error. Please try again."
    assert "provider down" in body["details"]
    assert conversation_store.query() == []


def test_server_error_details_are_hidden_in_production(database, conversation_store):
    production = Settings(_env_file=None, SECRET_KEY="test-secret", ENVIRONMENT="production")
    failing = RecordingGeneration(error=RuntimeError("provider down"))
    with TestClient(create_app(settings=production, database=database, generation_service=failing)) as client:
        response = client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 500
    assert "details" not in response.json()


def test_feedback_updates_stored_turn(client, conversation_store):
    client.post("/api/chat", json={"message": "hello", "sessionId": "s1"})
    turn = conversation_store.query(session_id="s1")[0]

    response = client.post("/api/feedback", json={"conversationId": turn.id, "feedback": "helpful"})

    assert response.json() == {"success": True}
    assert conversation_store.get(turn.id).feedback == "helpful"


def test_feedback_for_unknown_turn_succeeds(client):
    response = client.post("/api/feedback", json={"conversationId": 999, "feedback": "helpful"})

    assert response.status_code == 200
    assert response.json() == {"success": True}


def test_login_with_wrong_password_is_rejected(client, database):
    AdminStore(database).create_admin("admin", "Str0ng!pass")

    response = client.post("/api/admin/login", json={"username": "admin", "password": "nope"})

    assert response.status_code == 401


def test_login_returns_profile(client, database):
    AdminStore(database).create_admin("admin", "Str0ng!pass", full_name="Site Admin")

    response = client.post("/api/admin/login", json={"username": "admin", "password": "Str0ng!pass"})

    assert response.json()["user"] == {"id": 1, "username": "admin", "fullName": "Site Admin", "role": "admin"}


def test_admin_routes_require_a_token(client):
    assert client.get("/api/admin/knowledge-base").status_code == 401
    response = client.get("/api/admin/knowledge-base", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 403


def test_knowledge_base_crud(client, auth_headers):
    created = client.post(
        "/api/admin/knowledge-base",
        json={"category": "Warranty", "question": "Is the warranty transferable?", "answer": "No.", "keywords": ["warranty"]},
        headers=auth_headers,
    ).json()["data"]
    assert created["version"] == 1
    assert created["created_by"] == "admin"

    updated = client.put(
        f"/api/admin/knowledge-base/{created['id']}", json={"answer": "Only with the invoice."}, headers=auth_headers
    ).json()["data"]
    assert updated["version"] == 2
    assert updated["answer"] == "Only with the invoice."
    assert updated["keywords"] == ["warranty"]

    page = client.get("/api/admin/knowledge-base", params={"category": "Warranty"}, headers=auth_headers).json()
    assert page["total"] == 1

    assert client.delete(f"/api/admin/knowledge-base/{created['id']}", headers=auth_headers).json() == {"success": True}
    assert client.get("/api/admin/knowledge-base", headers=auth_headers).json()["total"] == 0


def test_null_fields_in_update_leave_entry_unchanged(client, auth_headers, warranty_entry):
    response = client.put(
        f"/api/admin/knowledge-base/{warranty_entry.id}",
        json={"keywords": None, "question": None, "is_active": None, "answer": "Five years."},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["keywords"] == ["warranty"]
    assert data["question"] == warranty_entry.question
    assert data["is_active"] is True
    assert data["answer"] == "Five years."
    assert data["version"] == 2


def test_admin_database_failure_is_a_json_server_error(client, auth_headers):
    client.app.state.knowledge_store = FailingKnowledgeStore()

    response = client.get("/api/admin/categories", headers=auth_headers)

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Sorry, I encountered an error. Please try again."
    assert "database is locked" in body["details"]


def test_update_of_unknown_entry_is_not_found(client, auth_headers):
    response = client.put("/api/admin/knowledge-base/404", json={"answer": "x"}, headers=auth_headers)

    assert response.status_code == 404


def test_csv_upload_and_categories(client, auth_headers):
    payload = (
        b"category,question,answer,keywords\n"
        b"Products,Do you make farm tyres?,Yes.,farm\n"
        b"Products,Do you make truck tyres?,Yes.,truck\n"
        b"Warranty,How do I claim warranty?,Visit a dealer.,\n"
    )

    response = client.post(
        "/api/admin/knowledge-base/upload",
        files={"file": ("faq.csv", payload, "text/csv")},
        headers=auth_headers,
    )

    assert response.json() == {"success": True, "message": "Successfully uploaded 3 entries"}
    categories = client.get("/api/admin/categories", headers=auth_headers).json()
    assert categories == [{"category": "Products", "count": 2}, {"category": "Warranty", "count": 1}]


def test_malformed_csv_upload_is_a_client_error(client, auth_headers):
    response = client.post(
        "/api/admin/knowledge-base/upload",
        files={"file": ("faq.csv", b"category,question\nProducts,Farm?\n", "text/csv")},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert "answer" in response.json()["error"]


def test_analytics(client, auth_headers):
    client.post("/api/chat", json={"message": "hello"})
    client.post("/api/chat", json={"message": "hello"})

    body = client.get("/api/admin/analytics", headers=auth_headers).json()

    assert body["totalConversations"] == 2
    assert body["feedbackStats"] == []
    assert body["topQuestions"] == [{"userMessage": "hello", "count": 2}]


def test_products(client, auth_headers):
    created = client.post(
        "/api/admin/products",
        json={"product_name": "SecuraDrive", "category": "Car & SUV tyres", "features": ["Low noise"]},
        headers=auth_headers,
    ).json()["data"]
    assert created["is_active"] is True

    products = client.get("/api/admin/products", headers=auth_headers).json()
    assert [product["product_name"] for product in products] == ["SecuraDrive"]
