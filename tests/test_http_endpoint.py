from __future__ import annotations

import pytest
from starlette.testclient import TestClient

from linea_eligibility import mcp_server
from linea_eligibility.service import EligibilityService

from ._rpc_helpers import TRUE_WORD, FakeCaller, _addresses, _config


@pytest.fixture
def client(monkeypatch):
    service = EligibilityService(_config(), client=FakeCaller(lambda _call: TRUE_WORD))
    monkeypatch.setattr(mcp_server, "_service", service)
    app = mcp_server.server.sse_app()
    return TestClient(app)


def test_post_batch(client):
    response = client.post(mcp_server.BATCH_PATH, json={"addresses": _addresses(3)})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert set(body["results"]) == set(_addresses(3))


def test_post_invalid_json_is_400(client):
    response = client.post(
        mcp_server.BATCH_PATH,
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "addresses[] is required"


def test_post_malformed_address_is_400(client):
    response = client.post(mcp_server.BATCH_PATH, json={"addresses": ["0xabc"]})
    assert response.status_code == 400
    assert response.json()["error"]["details"] == {"invalid": ["0xabc"]}


def test_get_is_405(client):
    response = client.get(mcp_server.BATCH_PATH)
    assert response.status_code == 405
    assert response.json() == {"error": {"message": "Method not allowed"}}


def test_check_eligibility_tool_includes_summary(monkeypatch):
    service = EligibilityService(_config(), client=FakeCaller(lambda _call: TRUE_WORD))
    monkeypatch.setattr(mcp_server, "_service", service)
    body = mcp_server.check_eligibility(_addresses(2)[0])
    assert body["summary"]["eligible"] == 1


@pytest.mark.parametrize("method", ["HEAD", "OPTIONS"])
def test_head_and_options_are_405(client, method):
    response = client.request(method, mcp_server.BATCH_PATH)
    assert response.status_code == 405
    if method == "OPTIONS":
        assert response.json() == {"error": {"message": "Method not allowed"}}


def test_bad_configuration_is_json_500(monkeypatch):
    monkeypatch.setenv("ELIG_ARG_MODE", "bogus")
    monkeypatch.setattr(mcp_server, "_service", None)
    client = TestClient(mcp_server.server.sse_app())

    response = client.post(mcp_server.BATCH_PATH, json={"addresses": _addresses(1)})
    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert "bogus" in body["error"]["message"]
    assert mcp_server._service is None
