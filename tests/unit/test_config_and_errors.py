# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import dataclasses
import logging
import socket
import ssl

import httpx
import pytest

from requestkit import config
from requestkit.config import DEFAULT_PORT, DEFAULT_SCHEME, ClientCertificate, ClientSettings
from requestkit.errors import (
    BodyReadError,
    ConfigError,
    ContentTypeError,
    ErrorCategory,
    URLError,
    categorize_exception,
    error_category_to_reason,
)
from requestkit.log import setup_logging


def test_client_settings_defaults():
    settings = ClientSettings()
    assert settings.scheme == DEFAULT_SCHEME == "https"
    assert settings.port == DEFAULT_PORT == 443
    assert settings.timeout is None
    assert settings.skip_verify is False
    assert settings.client_certificates == ()


def test_client_settings_are_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        ClientSettings().port = 80  # type: ignore[misc]


def test_with_client_certificate_appends_in_order():
    first = ClientCertificate.from_files("a.crt", "a.key")
    second = ClientCertificate.from_pem("CERT", "KEY")
    settings = ClientSettings().with_client_certificate(first).with_client_certificate(second)
    assert settings.client_certificates == (first, second)
    assert second.cert_pem == b"CERT"
    assert second.in_memory is True
    assert first.in_memory is False


@pytest.mark.parametrize(
    ("host", "settings", "expected"),
    [
        ("example.com", ClientSettings(), 0),
        ("", ClientSettings(), 1),
        ("example.com", ClientSettings(port=-1), 1),
        ("example.com", ClientSettings(port=True), 1),
        ("example.com", ClientSettings(timeout=-2), 1),
        ("example.com", ClientSettings(client_certificates=(ClientCertificate.from_files("", "k"),)), 1),
        ("example.com", ClientSettings(client_certificates=(ClientCertificate(cert_pem=b"c"),)), 1),
    ],
)
def test_client_settings_problems(host, settings, expected):
    assert len(settings.problems(host)) == expected


def test_validate_raises_config_error_listing_problems():
    with pytest.raises(ConfigError) as excinfo:
        ClientSettings(scheme="gopher").validate("")
    assert "host must not be empty" in str(excinfo.value)
    assert "unsupported scheme 'gopher'" in str(excinfo.value)


def test_client_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("REQUESTKIT_SCHEME", "http")
    monkeypatch.setenv("REQUESTKIT_PORT", "8080")
    monkeypatch.setenv("REQUESTKIT_TIMEOUT", "5.5")
    monkeypatch.setenv("REQUESTKIT_TLS_SERVER_NAME", "sni.example")
    monkeypatch.setenv("REQUESTKIT_SKIP_VERIFY", "yes")

    settings = config.load_client_settings()

    assert settings.scheme == "http"
    assert settings.port == 8080
    assert settings.timeout == 5.5
    assert settings.tls_server_name == "sni.example"
    assert settings.skip_verify is True


def test_client_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("REQUESTKIT_PORT", "eighty")
    monkeypatch.setenv("REQUESTKIT_TIMEOUT", "soon")
    monkeypatch.setenv("REQUESTKIT_SKIP_VERIFY", "nope")
    monkeypatch.setenv("REQUESTKIT_TLS_SERVER_NAME", "")

    settings = config.load_client_settings()

    assert settings.port == DEFAULT_PORT
    assert settings.timeout is None
    assert settings.skip_verify is False
    assert settings.tls_server_name is None


def test_load_client_settings_reads_env_at_call_time(monkeypatch):
    monkeypatch.setenv("REQUESTKIT_PORT", "81")
    assert config.load_client_settings().port == 81
    monkeypatch.setenv("REQUESTKIT_PORT", "82")
    assert config.load_client_settings().port == 82


def test_body_read_error_is_os_error():
    assert issubclass(BodyReadError, OSError)
    assert issubclass(ConfigError, ValueError)


def test_content_type_error_keeps_content_type():
    exc = ContentTypeError("text/html")
    assert exc.content_type == "text/html"
    assert "text/html" in str(exc)


def test_categorize_exception():
    request = httpx.Request("GET", "https://example.test")
    assert categorize_exception(URLError("x")) == ErrorCategory.URL
    assert categorize_exception(BodyReadError("x")) == ErrorCategory.BODY_READ
    assert categorize_exception(httpx.ConnectTimeout("slow", request=request)) == ErrorCategory.TIMEOUT
    assert categorize_exception(httpx.ConnectError("refused", request=request)) == ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ConnectionRefusedError()) == ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(RuntimeError("?")) == ErrorCategory.UNKNOWN_ERROR

    tls_failure = httpx.ConnectError("handshake failed", request=request)
    tls_failure.__cause__ = ssl.SSLError("bad certificate")
    assert categorize_exception(tls_failure) == ErrorCategory.SSL_ERROR

    dns_failure = httpx.ConnectError("lookup failed", request=request)
    dns_failure.__cause__ = socket.gaierror("no such host")
    assert categorize_exception(dns_failure) == ErrorCategory.DNS_ERROR


def test_error_category_to_reason():
    assert error_category_to_reason(ErrorCategory.TIMEOUT) == "Network timeout"
    assert error_category_to_reason(None) == ""


def test_setup_logging_uses_requested_level(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    setup_logging("debug")
    setup_logging("not-a-level")
    assert [call["level"] for call in calls] == [logging.DEBUG, logging.WARNING]
