# tests/conftest.py
import datetime as _dt
import json
import os
import types
from collections.abc import Callable

import pytest
import requests
from freezegun import freeze_time
from requests.structures import CaseInsensitiveDict

from nimbledroid.config import ClientConfig
from nimbledroid.http_client import HttpClient

API_KEY = "test-key"
APK_URL = "https://nimbledroid.com/api/v2/users/me/apks/42"


# ---------------------------------------------------------------------
# Live tests are opt-in: use --live or RUN_LIVE_TESTS=1
# ---------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked as 'live' (real calls to the profiling service).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    run_live = config.getoption("--live") or os.getenv("RUN_LIVE_TESTS") == "1"
    if run_live:
        return
    skip_live = pytest.mark.skip(reason="live tests disabled (use --live or RUN_LIVE_TESTS=1)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------
# Test-wide env defaults (autouse, function-scoped)
# ---------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _env_defaults(monkeypatch, tmp_path):
    # Write logs to a throwaway dir so real logs stay clean (per test)
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("ACTIVITY_LOG_PREFIX", "activity-test")
    monkeypatch.setenv("ERROR_LOG_PREFIX", "error-test")
    monkeypatch.delenv("LOG_DISABLE", raising=False)
    for name in (
        "NIMBLEDROID_ENDPOINT",
        "NIMBLEDROID_USER_AGENT",
        "NIMBLEDROID_HOST",
        "NIMBLEDROID_POLL_INTERVAL",
        "NIMBLEDROID_REQUEST_TIMEOUT",
        "NIMBLEDROID_GET_RETRIES",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NIMBLEDROID_API_KEY", API_KEY)
    yield


# ---------------------------------------------------------------------
# Fake transport
# ---------------------------------------------------------------------
class FakeResponse:
    def __init__(self, body, status_code: int = 200):
        self.text = body if isinstance(body, str) else json.dumps(body)
        self.status_code = status_code


class FakeSession:
    """
    Stand-in for requests.Session.

    `routes` maps URL -> body (dict/list/str), Exception instance (raised),
    or a list of those consumed one per call (last one repeats).
    Every call is recorded in `calls` with the headers in effect.
    """

    def __init__(self, routes: dict | None = None):
        self.headers = CaseInsensitiveDict()
        self.routes = dict(routes or {})
        self.calls: list[types.SimpleNamespace] = []
        self.closed = False

    def _respond(self, method: str, url: str, **kwargs):
        self.calls.append(
            types.SimpleNamespace(method=method, url=url, headers=dict(self.headers), kwargs=kwargs)
        )
        if url not in self.routes:
            raise requests.ConnectionError(f"no route to {url}")
        route = self.routes[url]
        if isinstance(route, list):
            route = route.pop(0) if len(route) > 1 else route[0]
        if isinstance(route, BaseException):
            raise route
        if isinstance(route, FakeResponse):
            return route
        return FakeResponse(route)

    def get(self, url, **kwargs):
        return self._respond("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._respond("POST", url, **kwargs)

    def mount(self, prefix, adapter):
        pass

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(fake_session) -> HttpClient:
    return HttpClient(API_KEY, ClientConfig(), session=fake_session)


@pytest.fixture
def apk_file(tmp_path):
    p = tmp_path / "app.apk"
    p.write_bytes(b"PK\x03\x04fake-apk-bytes")
    return p


@pytest.fixture
def frozen_clock():
    """Frozen time plus a sleep() that advances it instead of blocking."""
    with freeze_time("2026-01-01T00:00:00Z") as frozen:

        def _sleep(seconds: float) -> None:
            frozen.tick(_dt.timedelta(seconds=seconds))

        yield types.SimpleNamespace(frozen=frozen, sleep=_sleep)


@pytest.fixture
def read_log() -> Callable[[str], list[dict]]:
    """Read back the JSONL records written to the per-test log dir."""

    def _read(kind: str = "activity") -> list[dict]:
        from service import logging_utils

        path = logging_utils.get_activity_log_path() if kind == "activity" else logging_utils.get_error_log_path()
        if not os.path.exists(path):
            return []
        with open(path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]

    return _read
