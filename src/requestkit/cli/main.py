# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""requestkit CLI: send one request and print the response."""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import replace
from typing import Any

import httpx

from ..config import DEFAULT_USER_AGENT, ClientCertificate, ClientSettings, load_client_settings
from ..errors import ContentTypeError, EncodingError, RequestKitError, categorize_exception, error_category_to_reason
from ..http import Client, FormBodyParams, JsonBodyParams, QueryParams, Request, Response
from ..http.headers import CONTENT_TYPE_HEADER
from ..http.params import CONTENT_TYPE_OCTET_STREAM
from ..log import setup_logging

CLI_TEXT_TRUNCATION_BYTES = 4096
EXIT_OK = 0
EXIT_HTTP_ERROR = 1
EXIT_REQUEST_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send one HTTP request through requestkit and print the response")
    parser.add_argument("method", help="HTTP method, e.g. GET or POST")
    parser.add_argument("host", help="Target host name or address")
    parser.add_argument("path", nargs="?", default="/", help="Request path (default: /)")
    parser.add_argument("--scheme", help="URL scheme (default: https, or REQUESTKIT_SCHEME)")
    parser.add_argument("--port", type=int, help="Target port (default: 443, or REQUESTKIT_PORT)")
    parser.add_argument("--timeout", type=float, help="Timeout in seconds (default: none)")
    parser.add_argument("--insecure", action="store_true", help="Skip TLS certificate verification")
    parser.add_argument("--server-name", help="TLS server name (SNI) override")
    parser.add_argument("--cert", help="Client certificate file (PEM)")
    parser.add_argument("--key", help="Client private key file (PEM)")
    parser.add_argument("--host-header", default="", help="Override the Host header")
    parser.add_argument("-H", "--header", action="append", default=[], metavar="NAME:VALUE", help="Request header (repeatable)")
    parser.add_argument("-q", "--query", action="append", default=[], metavar="KEY=VALUE", help="Query parameter (repeatable)")
    body = parser.add_mutually_exclusive_group()
    body.add_argument("--json", dest="json_body", metavar="JSON", help="JSON request body")
    body.add_argument("-F", "--field", action="append", default=[], metavar="KEY=VALUE", help="Multipart form field (repeatable)")
    parser.add_argument("--file", action="append", default=[], metavar="FIELD=PATH", help="Multipart file attachment (repeatable, not with --json)")
    parser.add_argument("--log-level", help="Logging level (default: WARNING, or REQUESTKIT_LOG_LEVEL)")
    return parser


def _split_pair(raw: str, sep: str, option: str) -> tuple[str, str]:
    key, found, value = raw.partition(sep)
    if not found or not key.strip():
        raise argparse.ArgumentTypeError(f"{option} expects {sep!r}-separated pairs, got {raw!r}")
    return key.strip(), value.strip() if sep == ":" else value


def build_settings(args: argparse.Namespace) -> ClientSettings:
    settings = load_client_settings()
    overrides: dict[str, Any] = {}
    if args.scheme:
        overrides["scheme"] = args.scheme
    if args.port is not None:
        overrides["port"] = args.port
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if args.insecure:
        overrides["skip_verify"] = True
    if args.server_name:
        overrides["tls_server_name"] = args.server_name
    if overrides:
        settings = replace(settings, **overrides)
    if args.cert or args.key:
        settings = settings.with_client_certificate(ClientCertificate.from_files(args.cert or "", args.key or ""))
    return settings


def build_request(args: argparse.Namespace) -> Request:
    request = Request(args.method.upper(), args.path, host=args.host_header)
    for raw in args.header:
        name, value = _split_pair(raw, ":", "--header")
        request.add_header(name, value)
    if "User-Agent" not in request.headers:
        request.set_header("User-Agent", DEFAULT_USER_AGENT)

    if args.query:
        query = QueryParams()
        for raw in args.query:
            query.add(*_split_pair(raw, "=", "--query"))
        request.query_params = query

    if args.json_body is not None:
        if args.file:
            raise argparse.ArgumentTypeError("--file cannot be combined with --json")
        try:
            request.body_params = JsonBodyParams(json.loads(args.json_body))
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"--json is not valid JSON: {exc}") from exc
    elif args.field or args.file:
        form = FormBodyParams(dict(_split_pair(raw, "=", "--field") for raw in args.field))
        for raw in args.file:
            field_name, path = _split_pair(raw, "=", "--file")
            with open(path, "rb") as fh:
                form.add_file(field_name, os.path.basename(path), fh.read())
        request.body_params = form

    # build() only replaces an existing Content-Type with the encoder's value.
    if request.body_params is not None and CONTENT_TYPE_HEADER not in request.headers:
        request.set_header(CONTENT_TYPE_HEADER, CONTENT_TYPE_OCTET_STREAM)
    return request


def _truncate_text_bytes(text: str, max_bytes: int) -> str:
    raw = text.encode("utf-8")
    if len(raw) <= max_bytes:
        return text
    suffix = "...[truncated]"
    keep = max(max_bytes - len(suffix), 0)
    return raw[:keep].decode("utf-8", errors="ignore") + suffix


def _print_response(response: Response) -> None:
    print(f"HTTP {response.status_code}")
    for name, value in response.headers.multi_items():
        print(f"{name}: {value}")
    print()
    try:
        payload = response.json_body()
    except (ContentTypeError, EncodingError):
        print(_truncate_text_bytes(response.text, CLI_TEXT_TRUNCATION_BYTES))
        return
    json.dump(payload, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None, *, transport: httpx.BaseTransport | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        request = build_request(args)
    except (argparse.ArgumentTypeError, OSError) as exc:
        parser.error(str(exc))

    try:
        with Client(args.host, build_settings(args), transport=transport) as client:
            response = client.do(request)
    except (RequestKitError, httpx.HTTPError) as exc:
        reason = error_category_to_reason(categorize_exception(exc))
        print(f"[requestkit] {reason}: {exc}", file=sys.stderr)
        return EXIT_REQUEST_ERROR

    _print_response(response)
    return EXIT_OK if response.ok else EXIT_HTTP_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
