"""
End-to-end tests for the demo server through FastAPI's TestClient.

Covers the route table, the 404 catch-all, session cookie issuance,
protective headers on every response, and error recovery.
"""

import time
from datetime import datetime

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from pipeline import SECURITY_HEADERS


# ── Route table ───────────────────────────────────────────────────────────


class TestHomePage:
    def test_home_is_html(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")

    def test_home_mentions_demo(self, client):
        response = client.get("/")
        assert "Socket Security Demo" in response.text


class TestHealth:
    def test_health_status(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health_timestamp_parses(self, client):
        body = client.get("/health").json()
        parsed = datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))
        assert parsed.tzinfo is not None

    def test_health_timestamp_follows_clock(self, client, clock):
        assert client.get("/health").json()["timestamp"] == "2026-01-01T12:00:00.000Z"
        clock.advance(seconds=90, milliseconds=5)
        assert client.get("/health").json()["timestamp"] == "2026-01-01T12:01:30.005Z"

    def test_health_counts_runtime_dependencies(self, client):
        # Fixture manifest declares six runtime deps and one test extra
        assert client.get("/health").json()["dependencies"] == 6


class TestInfo:
    def test_info_fields(self, client):
        response = client.get("/api/info")
        assert response.status_code == 200
        body = response.json()
        assert body["app"] == "Socket NodeGoat Demo"
        assert body["version"] == "2.3.4"
        assert body["nodeVersion"].startswith("v3.")
        assert body["uptime"] >= 0

    def test_uptime_advances_with_monotonic_clock(self, client, monotonic):
        first = client.get("/api/info").json()["uptime"]
        monotonic.advance(2.5)
        second = client.get("/api/info").json()["uptime"]
        assert first == 0
        assert second == pytest.approx(2.5)

    def test_uptime_non_decreasing_in_real_time(self, manifest_path, public_dir):
        from config import Settings
        from main import create_app

        real_client = TestClient(create_app(Settings(public_dir=public_dir, manifest_path=manifest_path)))
        first = real_client.get("/api/info").json()["uptime"]
        time.sleep(0.05)
        second = real_client.get("/api/info").json()["uptime"]
        assert 0 <= first <= second


class TestHeadRequests:
    def test_head_home(self, client):
        response = client.head("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")

    @pytest.mark.parametrize("path", ["/health", "/api/info"])
    def test_head_json_routes(self, client, path):
        response = client.head(path)
        assert response.status_code == 200
        assert response.headers["x-content-type-options"] == "nosniff"

    def test_head_static_file(self, client):
        assert client.head("/hello.txt").status_code == 200


class TestNotFound:
    @pytest.mark.parametrize("path", ["/nope", "/api", "/api/info/extra", "/health/", "/docs"])
    def test_unknown_paths(self, client, path):
        response = client.get(path)
        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found"}

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "PATCH"])
    def test_wrong_method_on_known_path(self, client, method):
        response = client.request(method, "/health")
        assert response.status_code == 404


# ── Static assets ─────────────────────────────────────────────────────────


class TestStaticAssets:
    def test_serves_file_with_inferred_type(self, client):
        response = client.get("/hello.txt")
        assert response.status_code == 200
        assert response.text == "hello from public\n"
        assert response.headers["content-type"].startswith("text/plain")

    def test_serves_nested_file(self, client):
        response = client.get("/css/site.css")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/css")

    def test_dotfiles_are_not_served(self, client):
        assert client.get("/.secret").status_code == 404

    def test_static_only_answers_get(self, client):
        assert client.post("/hello.txt").status_code == 404

    def test_encoded_question_mark_stays_in_path(self, client):
        # %3F decodes into the path itself, not a query string
        assert client.get("/hello.txt%3Fanything").status_code == 404


# ── Sessions ──────────────────────────────────────────────────────────────


class TestSessionCookie:
    def test_first_request_issues_cookie(self, client, store):
        response = client.get("/health")
        assert "connect.sid" in response.headers["set-cookie"]
        assert "HttpOnly" in response.headers["set-cookie"]
        assert "Max-Age=86400" in response.headers["set-cookie"]
        assert len(store) == 1

    def test_replayed_cookie_reuses_session(self, client, store):
        client.get("/health")
        second = client.get("/api/info")
        assert "set-cookie" not in second.headers
        assert len(store) == 1

    def test_tampered_cookie_gets_new_session(self, client, store):
        client.get("/health")
        client.cookies.clear()
        client.cookies.set("connect.sid", "forged.signature")
        response = client.get("/health")
        assert "set-cookie" in response.headers
        assert len(store) == 2

    def test_app_uses_the_store_it_was_given(self, app, store):
        assert app.state.store is store

    def test_cookieless_sessions_are_swept(self, store, clock, app):
        for _ in range(100):
            # fresh client each time, so no cookie is ever replayed
            TestClient(app).get("/health")
        assert len(store) == 100

        clock.advance(hours=24, seconds=1)
        TestClient(app).get("/health")
        assert len(store) == 1

    def test_handlers_see_attached_session(self, app, client, store):
        async def whoami(request: Request):
            return {"session_id": request.state.session.session_id}

        app.add_api_route("/whoami", whoami)
        first = client.get("/whoami").json()["session_id"]
        second = client.get("/whoami").json()["session_id"]
        assert first == second
        assert first in store

    def test_expired_session_is_replaced(self, client, store, clock):
        client.get("/health")
        clock.advance(hours=24, seconds=1)
        response = client.get("/health")
        assert "set-cookie" in response.headers
        assert len(store) == 1


# ── Security headers ──────────────────────────────────────────────────────


class TestSecurityHeaders:
    @pytest.mark.parametrize("method,path", [
        ("GET", "/"),
        ("GET", "/health"),
        ("GET", "/api/info"),
        ("GET", "/hello.txt"),
        ("GET", "/missing"),
        ("DELETE", "/"),
    ])
    def test_every_header_exactly_once(self, client, method, path):
        response = client.request(method, path)
        for name, value in SECURITY_HEADERS.items():
            assert response.headers.get_list(name) == [value], name

    def test_headers_on_bad_request(self, client):
        response = client.post("/", content=b"{oops", headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert response.headers.get_list("x-content-type-options") == ["nosniff"]


# ── Error recovery ────────────────────────────────────────────────────────


class TestErrorRecovery:
    def test_malformed_json_is_bad_request(self, client, store):
        response = client.post("/", content=b'{"a": ', headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert "malformed JSON" in response.json()["detail"]
        # Body decoding fails before the session stage runs
        assert "set-cookie" not in response.headers
        assert len(store) == 0

    def test_oversized_body_is_rejected(self, client):
        payload = b'{"x": "' + b"a" * (200 * 1024) + b'"}'
        response = client.post("/", content=payload, headers={"content-type": "application/json"})
        assert response.status_code == 413

    def test_valid_json_on_unknown_route_is_not_found(self, client):
        response = client.post("/submit", json={"name": "demo"})
        assert response.status_code == 404

    def test_handler_exception_becomes_500(self, app, caplog):
        async def boom():
            raise RuntimeError("handler exploded")

        app.add_api_route("/boom", boom)
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/boom")
        assert response.status_code == 500
        assert response.json() == {"detail": "Internal Server Error"}
        assert response.headers["x-frame-options"] == "SAMEORIGIN"
        assert "Unhandled error serving GET /boom" in caplog.text

        # Server keeps serving afterwards
        assert client.get("/health").status_code == 200
