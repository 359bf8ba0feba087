"""Tests for error payloads and secret lookup."""

import httpx
import pytest

from core.errors import ConfigurationError, InvalidInput, VendorCallFailed, VendorUnavailable, redact
from core.secrets import get_json_secret, get_secret, secret_env_name


def test_redact_keeps_both_ends():
    assert redact("abcdefghijklmnopqrstuvwxyz") == "abcdefgh***stuvwxyz"


def test_redact_short_values_entirely():
    assert redact("secret") == "***"
    assert redact(None) is None


def test_invalid_input_body():
    error = InvalidInput("Invalid employee number: 1")

    assert error.status_code == 400
    assert error.to_body() == {"error": "InvalidInput", "message": "Invalid employee number: 1"}


def test_vendor_error_body_redacts_credential():
    cause = httpx.ConnectError("connection refused")
    error = VendorUnavailable(
        "TSheets API failed to respond.",
        vendor="TSheets",
        stage="dev",
        url="https://rest.tsheets.com/api/v1/users",
        credential="S.1__0123456789abcdef",
        cause=cause,
    )

    body = error.to_body()

    assert error.status_code == 503
    assert isinstance(error, VendorCallFailed)
    assert body["api_key"] == "S.1__012***89abcdef"
    assert "0123456789abcdef" not in str(body)
    assert body["cause"] == {"name": "ConnectError", "message": "connection refused"}


@pytest.mark.parametrize(
    "name, env_name",
    [
        ("/TSheets/accessToken", "TSHEETS_ACCESS_TOKEN"),
        ("/ADP/CYK/SSLCert", "ADP_CYK_SSLCERT"),
        ("/ADP/CYK/ClientID", "ADP_CYK_CLIENT_ID"),
        ("/Unanet/login", "UNANET_LOGIN"),
        ("/Graph/tenantId", "GRAPH_TENANT_ID"),
    ],
)
def test_secret_env_name(name, env_name):
    assert secret_env_name(name) == env_name


def test_get_secret(monkeypatch):
    monkeypatch.setenv("TSHEETS_ACCESS_TOKEN", " token ")

    assert get_secret("/TSheets/accessToken") == "token"


def test_get_secret_missing(monkeypatch):
    monkeypatch.delenv("TSHEETS_ACCESS_TOKEN", raising=False)

    with pytest.raises(ConfigurationError) as exc_info:
        get_secret("/TSheets/accessToken")
    assert exc_info.value.details == ["Set the TSHEETS_ACCESS_TOKEN environment variable"]


def test_get_json_secret(monkeypatch):
    monkeypatch.setenv("UNANET_LOGIN", '{"username": "portal", "password": "hunter2"}')

    assert get_json_secret("/Unanet/login", "username", "password")["username"] == "portal"


def test_get_json_secret_missing_keys(monkeypatch):
    monkeypatch.setenv("UNANET_LOGIN", '{"username": "portal"}')

    with pytest.raises(ConfigurationError, match="missing required fields"):
        get_json_secret("/Unanet/login", "username", "password")


def test_get_json_secret_not_json(monkeypatch):
    monkeypatch.setenv("UNANET_LOGIN", "portal:hunter2")

    with pytest.raises(ConfigurationError, match="not valid JSON"):
        get_json_secret("/Unanet/login")
