# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import httpx
import pytest

from requestkit.cli.main import build_parser, build_request, build_settings, main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("REQUESTKIT_SCHEME", "REQUESTKIT_PORT", "REQUESTKIT_TIMEOUT", "REQUESTKIT_TLS_SERVER_NAME", "REQUESTKIT_SKIP_VERIFY"):
        monkeypatch.delenv(name, raising=False)


def test_build_parser_defaults():
    args = build_parser().parse_args(["GET", "127.0.0.1"])
    assert args.method == "GET"
    assert args.host == "127.0.0.1"
    assert args.path == "/"
    assert args.header == []
    assert args.json_body is None


def test_build_settings_applies_flags():
    args = build_parser().parse_args(
        ["GET", "h", "--scheme", "http", "--port", "8080", "--timeout", "2", "--insecure", "--server-name", "sni"]
    )
    settings = build_settings(args)
    assert settings.scheme == "http"
    assert settings.port == 8080
    assert settings.timeout == 2.0
    assert settings.skip_verify is True
    assert settings.tls_server_name == "sni"
    assert settings.client_certificates == ()


def test_build_request_collects_headers_query_and_json():
    args = build_parser().parse_args(
        ["post", "h", "/api", "-H", "X-Id: 7", "-q", "b=2", "-q", "a=1", "-q", "a=3", "--json", '{"msg": "hi"}']
    )
    request = build_request(args)
    assert request.method == "POST"
    assert request.headers["x-id"] == "7"
    assert request.headers["user-agent"].startswith("requestkit/")
    assert request.query_params.encode() == "a=1&a=3&b=2"
    built = request.build("http://h:80")
    assert built.headers["content-type"] == "application/json; charset=UTF-8"
    assert built.content == b'{"msg":"hi"}'


def test_build_request_form_with_file(tmp_path):
    upload = tmp_path / "report.txt"
    upload.write_bytes(b"file-bytes")
    args = build_parser().parse_args(["POST", "h", "/up", "-F", "name=bob", "--file", f"doc={upload}"])
    built = build_request(args).build("http://h:80")
    assert built.headers["content-type"].startswith("multipart/form-data; boundary=")
    assert b'name="doc"; filename="report.txt"' in built.content
    assert b"file-bytes" in built.content


def test_main_prints_json_response(capsys):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, headers={"Content-Type": "application/json"}, content=b'{"hello":"world"}')

    code = main(["GET", "127.0.0.1", "/api/test", "--scheme", "http", "--port", "8080"], transport=httpx.MockTransport(handler))
    out = capsys.readouterr().out
    assert code == 0
    assert "HTTP 200" in out
    assert '"hello": "world"' in out
    assert str(seen[0].url) == "http://127.0.0.1:8080/api/test"


def test_main_non_2xx_returns_one(capsys):
    transport = httpx.MockTransport(lambda request: httpx.Response(404, text="missing"))
    assert main(["GET", "example.test"], transport=transport) == 1
    assert "missing" in capsys.readouterr().out


def test_main_transport_error_returns_two(capsys):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    assert main(["GET", "example.test"], transport=httpx.MockTransport(handler)) == 2
    assert "Network connectivity issue" in capsys.readouterr().err


def test_main_rejects_bad_header(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["GET", "example.test", "-H", "no-colon"])
    assert excinfo.value.code == 2
    assert "--header" in capsys.readouterr().err


def test_main_rejects_file_with_json(tmp_path, capsys):
    upload = tmp_path / "report.txt"
    upload.write_bytes(b"file-bytes")
    with pytest.raises(SystemExit) as excinfo:
        main(["POST", "example.test", "--json", "{}", "--file", f"doc={upload}"])
    assert excinfo.value.code == 2
    assert "--file cannot be combined with --json" in capsys.readouterr().err


def test_main_reports_library_errors(capsys):
    transport = httpx.MockTransport(lambda request: httpx.Response(200))
    assert main(["GET", "example.test", "--port", "70000"], transport=transport) == 2
    err = capsys.readouterr().err
    assert "[requestkit] Invalid client settings:" in err
    assert "70000" in err

    assert main(["GET", "example.test", "/bad%zz"], transport=transport) == 2
    assert "[requestkit] Request URL could not be built:" in capsys.readouterr().err


def test_main_zero_timeout_sends_without_timeout():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    assert main(["GET", "example.test", "--timeout", "0"], transport=httpx.MockTransport(handler)) == 0
    assert seen[0].extensions["timeout"] == {"connect": None, "read": None, "write": None, "pool": None}
