"""Tests for the health endpoint."""


def test_health_returns_ok(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "app" in data
    assert isinstance(data["provider_configured"], bool)


def test_health_needs_no_identity(client):
    response = client.get("/api/health", headers={"X-Owner-Id": ""})
    assert response.status_code == 200
