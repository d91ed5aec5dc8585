"""HTTP-level tests for /healthz and /readyz."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from siteprobe import create_app
from siteprobe.config import Settings
from siteprobe.exceptions import DependencyUnavailable
from siteprobe.prober import ReadinessChecks
from siteprobe.routes.health import get_readiness_checks


NO_CACHE = "no-store, no-cache, must-revalidate, max-age=0"


def _ok(settings):
    return None


async def _ok_async(settings):
    return None


def _make_client(settings: Settings, checks: ReadinessChecks | None = None) -> TestClient:
    app = create_app(settings)
    if checks is not None:
        app.dependency_overrides[get_readiness_checks] = lambda: checks
    return TestClient(app)


@pytest.fixture
def passing_checks() -> ReadinessChecks:
    return ReadinessChecks(database=_ok, cache=_ok_async, maintenance=_ok)


def test_healthz_ok() -> None:
    client = _make_client(Settings())
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.text == "OK\n"
    assert response.headers["content-type"].startswith("text/plain")
    assert response.headers["cache-control"] == NO_CACHE


def test_healthz_token_mismatch_is_404() -> None:
    client = _make_client(Settings(HEALTHZ_TOKEN="s3cret"))
    response = client.get("/healthz", params={"t": "wrong"})
    assert response.status_code == 404
    assert response.text == "Not Found\n"
    assert response.headers["cache-control"] == NO_CACHE

    assert client.get("/healthz", params={"t": "s3cret"}).status_code == 200


def test_readyz_ok(passing_checks) -> None:
    client = _make_client(Settings(), passing_checks)
    response = client.get("/readyz")
    assert response.status_code == 200
    assert response.text == "OK\n"
    assert response.headers["cache-control"] == NO_CACHE


def test_readyz_with_sqlite_database(sqlite_settings) -> None:
    """Default checks against a reachable database and no cache report OK."""
    client = _make_client(sqlite_settings)
    response = client.get("/readyz")
    assert response.status_code == 200
    assert response.text == "OK\n"


def test_readyz_with_sqlite_and_cache(fake_redis) -> None:
    server = fake_redis()
    settings = Settings(HEALTHZ_DB_URL="sqlite://", WP_REDIS_HOST="127.0.0.1", WP_REDIS_PORT=server.port)
    response = _make_client(settings).get("/readyz")
    assert response.status_code == 200
    assert response.text == "OK\n"


def test_readyz_bad_cache_reply(fake_redis) -> None:
    server = fake_redis(ping_reply=b"+NOPE\r\n")
    settings = Settings(HEALTHZ_DB_URL="sqlite://", WP_REDIS_HOST="127.0.0.1", WP_REDIS_PORT=server.port)
    response = _make_client(settings).get("/readyz")
    assert response.status_code == 503
    assert response.text == "unready: redis\n"


def test_readyz_unready_lists_tags() -> None:
    async def cache_down(settings):
        raise DependencyUnavailable("redis", "refused")

    def db_down(settings):
        raise DependencyUnavailable("db_connect", "Access denied for user 'wp' (password: hunter2)")

    checks = ReadinessChecks(database=db_down, cache=cache_down, maintenance=_ok)
    client = _make_client(Settings(), checks)
    response = client.get("/readyz")
    assert response.status_code == 503
    assert response.text == "unready: db_connect,redis\n"
    # details stay in the logs, never in the body
    assert "hunter2" not in response.text
    assert response.headers["cache-control"] == NO_CACHE


def test_readyz_maintenance_marker(sqlite_settings, tmp_path) -> None:
    (tmp_path / ".maintenance").touch()
    client = _make_client(sqlite_settings)
    response = client.get("/readyz")
    assert response.status_code == 503
    assert response.text == "unready: maintenance\n"


def test_readyz_token_mismatch_skips_checks() -> None:
    calls = []

    def db(settings):
        calls.append("db")

    async def cache(settings):
        calls.append("cache")

    checks = ReadinessChecks(database=db, cache=cache, maintenance=lambda s: calls.append("m"))
    client = _make_client(Settings(HEALTHZ_TOKEN="s3cret"), checks)

    response = client.get("/readyz")
    assert response.status_code == 404
    assert response.text == "Not Found\n"
    assert calls == []


def test_factory_settings_apply_to_routes() -> None:
    """Settings handed to create_app() are used by the routes, not re-read from the env."""
    client = TestClient(create_app(Settings(HEALTHZ_TOKEN="s3cret")))
    response = client.get("/healthz", params={"t": "wrong"})
    assert response.status_code == 404
    assert client.get("/healthz", params={"t": "s3cret"}).status_code == 200


def test_factory_settings_maintenance_flag() -> None:
    settings = Settings(HEALTHZ_DB_URL="sqlite://", HEALTHZ_MAINTENANCE=True)
    client = TestClient(create_app(settings))
    response = client.get("/readyz")
    assert response.status_code == 503
    assert response.text == "unready: maintenance\n"


def test_without_factory_settings_env_is_read_per_request(monkeypatch) -> None:
    client = TestClient(create_app())
    assert client.get("/healthz").status_code == 200

    monkeypatch.setenv("HEALTHZ_TOKEN", "rotated")
    assert client.get("/healthz").status_code == 404
    assert client.get("/healthz", params={"t": "rotated"}).status_code == 200
