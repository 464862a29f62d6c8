from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

# Make `gobench` and `esbulk` importable without installing the project.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TESTDATA = Path(__file__).resolve().parent / "testdata"


@pytest.fixture
def benchmark_result_lines() -> list[str]:
    return (TESTDATA / "benchmark-result.txt").read_text(encoding="utf-8").splitlines()


class FakeResponse:
    def __init__(self, status_code: int = 200, body=None, *, text: str | None = None, reason: str = "") -> None:
        self.status_code = status_code
        self.text = text if text is not None else ("" if body is None else json.dumps(body))
        self.reason = reason

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Stands in for requests.Session: routes (method, url) to canned responses."""

    def __init__(self, routes=None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[tuple[str, str, dict]] = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        r = self.routes.get((method, url))
        if r is None:
            raise AssertionError(f"unexpected request {method} {url}")
        if isinstance(r, Exception):
            raise r
        return r

    def methods(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def fake_store():
    """Factory for FakeSession routes against http://es:9200."""

    def _make(version="8.1.0", *, index_resp=None, bulk_resp=None, version_resp=None):
        base = "http://es:9200"
        routes = {
            ("GET", base): version_resp or FakeResponse(200, {"version": {"number": version}}),
            ("PUT", f"{base}/gobench"): index_resp or FakeResponse(200, {"acknowledged": True}),
            ("POST", f"{base}/_bulk"): bulk_resp or FakeResponse(200, {"errors": False, "items": []}),
        }
        return FakeSession(routes)

    return _make


@pytest.fixture
def fake_response():
    return FakeResponse
