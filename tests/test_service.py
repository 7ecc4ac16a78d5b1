from datetime import datetime

from tinylink import qr_utils


def test_healthz(client):
    res = client.get("/healthz")
    assert res.status_code == 200
    body = res.json()
    assert set(body) == {"status", "version", "timestamp", "environment", "database", "uptime"}
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["environment"] == "test"
    assert body["uptime"] >= 0
    datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))


def test_dashboard_is_served(client):
    res = client.get("/")
    assert res.status_code == 200
    assert "TinyLink" in res.text
    assert client.get("/static/app.js").status_code == 200


def test_config_uses_request_base_url(client):
    assert client.get("/config").json() == {"public_base_url": "http://testserver"}


def test_config_prefers_public_base_url(client, monkeypatch):
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://t.example")
    assert client.get("/config").json() == {"public_base_url": "https://t.example"}


def test_short_url():
    assert qr_utils.short_url("https://t.example/", "abc123") == "https://t.example/abc123"
