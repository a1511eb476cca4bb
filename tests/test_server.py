#!/usr/bin/env python3
"""
Test the nullpact API server and its HTTP client
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi.testclient import TestClient
from nullpact import __version__
from nullpact.server import NullpactClient
from nullpact.server.app import app

EXAMPLES = Path(__file__).resolve().parent.parent / "examples" / "contract_functions.py"

VIOLATING_SOURCE = '@contract("!null -> !null")\ndef f(s):\n    return None\n'


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    monkeypatch.delenv("NULLPACT_CHECK_CONTRACTS", raising=False)
    monkeypatch.delenv("NULLPACT_CONTRACT_ANNOTATIONS", raising=False)


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client, monkeypatch):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": __version__, "check_contracts": False}

    monkeypatch.setenv("NULLPACT_CHECK_CONTRACTS", "true")
    assert client.get("/").json()["check_contracts"] is True


def test_check_source(client):
    response = client.post("/api/check-source", json={"source": VIOLATING_SOURCE, "check_contracts": True})
    data = response.json()

    assert response.status_code == 200
    assert data["success"] is True
    result = data["result"]
    assert (result["total"], result["failed"]) == (1, 1)
    diagnostic = result["results"][0]["diagnostics"][0]
    assert diagnostic["kind"] == "CONTRACT_VIOLATION"
    assert diagnostic["line"] == 3


def test_check_source_uses_server_default(client):
    data = client.post("/api/check-source", json={"source": VIOLATING_SOURCE}).json()
    assert data["result"]["failed"] == 0
    assert data["result"]["results"][0]["state"] == "unsupported_but_valid"


def test_check_source_syntax_error(client):
    data = client.post("/api/check-source", json={"source": "def broken(:\n"}).json()
    assert data["success"] is False
    assert data["error"].startswith("Syntax error")


def test_check_file(client):
    data = client.post("/api/check-file", json={"file_path": str(EXAMPLES), "check_contracts": True}).json()
    assert data["success"] is True
    assert data["result"]["total"] == 10
    assert data["result"]["failed"] == 4


def test_check_missing_file(client):
    response = client.post("/api/check-file", json={"file_path": "does/not/exist.py"})
    assert response.status_code == 404


def test_validate_contract(client):
    data = client.post("/api/validate-contract",
                       json={"contract": "!null -> !null", "parameters": ["text"]}).json()
    assert data == {"valid": True, "deep_checkable": True, "errors": [], "warnings": []}


def test_validate_contract_errors(client):
    data = client.post("/api/validate-contract",
                       json={"contract": "nonnull, _ -> !null", "parameters": ["text"]}).json()
    assert data["valid"] is False
    assert data["deep_checkable"] is False
    assert len(data["errors"]) == 2

    data = client.post("/api/validate-contract", json={"contract": "!null", "parameters": ["x"]}).json()
    assert data["valid"] is False
    assert "unparseable clause" in data["errors"][0]


def test_validate_contract_warnings(client):
    data = client.post("/api/validate-contract",
                       json={"contract": "null -> null; !null -> !null", "parameters": ["x"]}).json()
    assert data["valid"] is True
    assert data["deep_checkable"] is False
    assert data["warnings"]

    data = client.post("/api/validate-contract",
                       json={"contract": "true -> !null", "parameters": ["x"]}).json()
    assert data["valid"] is True
    assert data["deep_checkable"] is False
    assert data["warnings"]


def _response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


def test_client_check_source():
    summary = {"file": "<string>", "total": 1, "clean": 0, "failed": 1, "results": []}
    with patch("nullpact.server.client.requests.post",
               return_value=_response({"success": True, "result": summary})) as post:
        result = NullpactClient("http://checker:8000/").check_source(VIOLATING_SOURCE, check_contracts=True)

    assert result == summary
    args, kwargs = post.call_args
    assert args[0] == "http://checker:8000/api/check-source"
    assert kwargs["json"]["check_contracts"] is True
    assert kwargs["json"]["source"] == VIOLATING_SOURCE


def test_client_raises_on_failed_check():
    with patch("nullpact.server.client.requests.post",
               return_value=_response({"success": False, "error": "Syntax error: bad"})):
        with pytest.raises(ValueError, match="Syntax error"):
            NullpactClient().check_file("broken.py")


def test_client_raises_on_http_error():
    with patch("nullpact.server.client.requests.post", return_value=_response({}, status_code=404)):
        with pytest.raises(requests.HTTPError):
            NullpactClient().check_file("missing.py")


def test_client_health_and_validate():
    with patch("nullpact.server.client.requests.get",
               return_value=_response({"status": "ok", "version": __version__, "check_contracts": False})):
        assert NullpactClient().health()["status"] == "ok"

    verdict = {"valid": True, "deep_checkable": True, "errors": [], "warnings": []}
    with patch("nullpact.server.client.requests.post", return_value=_response(verdict)) as post:
        assert NullpactClient().validate_contract("!null -> !null", ["text"]) == verdict
    assert post.call_args.kwargs["json"] == {"contract": "!null -> !null", "parameters": ["text"]}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
