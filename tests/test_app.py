"""Tests for app-level behaviour: health endpoints, error bodies and headers."""

import threading
import time
from unittest.mock import MagicMock

import httpx

from app.database.resource_store import ResourceStore, get_resource_store
from app.main import app


class TestHealthEndpoints:
    """Tests for the root and health endpoints."""

    def test_root(self, client):
        assert client.get("/").json()["status"] == "healthy"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_ready_without_supabase_config(self, client, monkeypatch):
        from app.config.settings import settings

        monkeypatch.setattr(settings, "supabase_url", "")
        response = client.get("/ready")
        assert response.status_code == 503

    def test_ready(self, client, monkeypatch):
        from app.config.settings import settings

        monkeypatch.setattr(settings, "supabase_url", "https://example.supabase.co")
        monkeypatch.setattr(settings, "supabase_key", "anon")
        assert client.get("/ready").json() == {"status": "ready"}


class TestErrorShape:
    """Tests for the {"error": ...} body."""

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nothing-here")
        assert response.status_code == 404
        assert "error" in response.json()

    def test_malformed_json_is_400(self, client, auth):
        response = client.post(
            "/api/v1/ideas",
            content="{not json",
            headers={**auth("alice"), "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert "error" in response.json()


class TestSecurityHeaders:
    """Tests for the security headers middleware."""

    def test_headers_present(self, client):
        response = client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_hsts_only_in_production(self):
        from app.core.middleware import security_headers

        assert b"Strict-Transport-Security" not in dict(security_headers(False))
        assert dict(security_headers(True))[b"Strict-Transport-Security"].startswith(b"max-age=")


class TestBlockingReads:
    """Tests that store retries do not stall unrelated requests."""

    def test_health_responsive_while_read_retries(self, client):
        """A read sleeping between retries runs off the event loop."""
        first_attempt = threading.Event()

        def unreachable(table):
            first_attempt.set()
            raise httpx.ConnectError("connection refused")

        supabase = MagicMock()
        supabase.table.side_effect = unreachable
        app.dependency_overrides[get_resource_store] = lambda: ResourceStore(
            supabase, read_retries=3, retry_backoff=0.5
        )

        outcome = {}
        worker = threading.Thread(
            target=lambda: outcome.update(response=client.get("/api/v1/ideas?public=true"))
        )
        worker.start()
        assert first_attempt.wait(timeout=5)

        started = time.monotonic()
        assert client.get("/health").status_code == 200
        assert time.monotonic() - started < 0.4

        worker.join(timeout=10)
        assert outcome["response"].status_code == 500
        assert supabase.table.call_count == 3
