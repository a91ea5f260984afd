"""Tests for the error boundary: stable error bodies and generic internal faults."""
from fastapi.testclient import TestClient

from notes_app.dependencies import get_auth_service
from notes_app.main import app


class _BrokenAuthService:
    def login(self, email, password):
        raise RuntimeError("database is on fire at 10.0.0.5")


class TestErrorBoundary:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_unexpected_fault_is_generic(self, client):
        app.dependency_overrides[get_auth_service] = lambda: _BrokenAuthService()
        with TestClient(app, raise_server_exceptions=False) as raw_client:
            resp = raw_client.post("/api/auth/login", json={"email": "a@example.com", "password": "secret1"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "InternalFault", "message": "Internal server error"}
        assert "10.0.0.5" not in resp.text

    def test_malformed_json_is_validation_error(self, client):
        resp = client.post(
            "/api/auth/login",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "ValidationError"
