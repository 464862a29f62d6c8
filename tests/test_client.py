import json

import pytest
import requests

from esbulk.client import NDJSON_CONTENT_TYPE, StoreClient, check_response
from esbulk.compat import CompatPolicy
from esbulk.errors import BulkItemError, StoreClientError, StoreError, VersionError


BASE = "http://es:9200"


def _client(session, **kw) -> StoreClient:
    return StoreClient(BASE + "/", index="gobench", session=session, **kw)


def test_get_version(fake_store):
    session = fake_store("7.11.1")
    v = _client(session).get_version()
    assert str(v) == "7.11.1"
    method, url, kw = session.calls[0]
    assert (method, url) == ("GET", BASE)
    assert kw["auth"] is None
    assert kw["timeout"] == 600
    assert kw["verify"] is True


def test_get_version_with_auth_and_transport_options(fake_store):
    session = fake_store("7.11.1")
    _client(session, username="myuser", password="mypassword", timeout=5, verify=False).get_version()
    _, _, kw = session.calls[0]
    assert kw["auth"] == ("myuser", "mypassword")
    assert kw["timeout"] == 5
    assert kw["verify"] is False


def test_get_version_unexpected_status(fake_store, fake_response):
    body = {"error": {"type": "security_exception", "reason": "missing authentication credentials"}, "status": 401}
    session = fake_store(version_resp=fake_response(401, body))
    with pytest.raises(VersionError, match="received unexpected 401 status code"):
        _client(session).get_version()


def test_get_version_malformed_body(fake_store, fake_response):
    session = fake_store(version_resp=fake_response(200, text="<html>"))
    with pytest.raises(VersionError):
        _client(session).get_version()
    session = fake_store(version_resp=fake_response(200, {"version": {}}))
    with pytest.raises(VersionError):
        _client(session).get_version()


def test_get_version_unreachable(fake_store):
    session = fake_store(version_resp=requests.ConnectionError("connection refused"))
    with pytest.raises(VersionError, match="connection refused"):
        _client(session).get_version()


def test_create_index_sends_mapping(fake_store):
    session = fake_store()
    assert _client(session).create_index(CompatPolicy()) is True
    method, url, kw = session.calls[0]
    assert (method, url) == ("PUT", BASE + "/gobench")
    assert kw["headers"]["Content-Type"] == "application/json"
    body = json.loads(kw["data"].decode("utf-8"))
    assert "properties" in body["mappings"]


def test_create_index_legacy_mapping(fake_store):
    session = fake_store()
    _client(session).create_index(CompatPolicy(mapping_type_name=True, action_doc_type=True))
    body = json.loads(session.calls[0][2]["data"])
    assert list(body["mappings"]) == ["_doc"]


def test_create_index_already_exists_is_success(fake_store, fake_response):
    exists = fake_response(
        400,
        {"error": {"type": "resource_already_exists_exception", "reason": "index [gobench/xyz] already exists"}},
    )
    session = fake_store(index_resp=exists)
    assert _client(session).create_index(CompatPolicy()) is False


def test_create_index_other_error_propagates(fake_store, fake_response):
    denied = fake_response(403, {"error": {"type": "security_exception", "reason": "action is unauthorized"}})
    session = fake_store(index_resp=denied)
    with pytest.raises(StoreError) as ei:
        _client(session).create_index(CompatPolicy())
    assert ei.value.kind == "security_exception"
    assert ei.value.status == 403
    assert str(ei.value) == "action is unauthorized"


def test_bulk_posts_ndjson(fake_store):
    session = fake_store()
    payload = '{"index":{"_index":"gobench"}}\n{"name":"BenchmarkX-8"}\n'
    _client(session).bulk(payload)
    method, url, kw = session.calls[0]
    assert (method, url) == ("POST", BASE + "/_bulk")
    assert kw["headers"]["Content-Type"] == NDJSON_CONTENT_TYPE
    assert kw["data"] == payload.encode("utf-8")


def test_bulk_item_errors_raise(fake_store, fake_response):
    resp = fake_response(
        200,
        {
            "errors": True,
            "items": [
                {"index": {"status": 201}},
                {"index": {"status": 400, "error": {"type": "mapper_parsing_exception", "reason": "bad field"}}},
                {"index": {"status": 400, "error": {"type": "other", "reason": "x"}}},
            ],
        },
    )
    session = fake_store(bulk_resp=resp)
    with pytest.raises(BulkItemError) as ei:
        _client(session).bulk("{}\n{}\n")
    assert ei.value.failed == 2
    assert ei.value.kind == "mapper_parsing_exception"


def test_bulk_timeout_is_wrapped(fake_store):
    session = fake_store(bulk_resp=requests.Timeout("read timed out"))
    with pytest.raises(StoreClientError, match="timeout"):
        _client(session, timeout=3).bulk("{}\n")


def test_check_response_without_error_object(fake_response):
    with pytest.raises(StoreClientError, match="502 Bad Gateway") as ei:
        check_response(fake_response(502, text="upstream down", reason="Bad Gateway"))
    assert not isinstance(ei.value, StoreError)
    assert check_response(fake_response(200, text="")) == {}
