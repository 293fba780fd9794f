# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Buffered response value and the parser that drains raw transport responses."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..errors import BodyReadError, ContentTypeError, EncodingError
from .headers import CONTENT_TYPE_HEADER, header_value
from .params import CONTENT_TYPE_JSON


@dataclass(frozen=True)
class Response:
    """Status, headers and fully buffered body of one HTTP exchange."""

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    raw_body: bytes = b""
    encoding: str = "utf-8"

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> str:
        return header_value(self.headers, CONTENT_TYPE_HEADER)

    @property
    def text(self) -> str:
        """Body decoded with `encoding`, falling back to UTF-8 for unknown codecs."""
        try:
            return self.raw_body.decode(self.encoding, errors="replace")
        except LookupError:
            return self.raw_body.decode("utf-8", errors="replace")

    def header(self, name: str, default: str = "") -> str:
        return header_value(self.headers, name, default)

    def json_body(self, **loads_kwargs: Any) -> Any:
        """
        Decode the body as JSON.

        Raises ContentTypeError unless the Content-Type header contains
        "application/json", even when the body itself would parse.
        """
        content_type = self.content_type
        if CONTENT_TYPE_JSON not in content_type:
            raise ContentTypeError(content_type)
        try:
            return json.loads(self.raw_body, **loads_kwargs)
        except ValueError as exc:
            raise EncodingError(f"unmarshal json body error: {exc}") from exc


def parse_response(http_response: httpx.Response) -> Response:
    """
    Drain `http_response` into a Response.

    The transport response is closed on every exit path, including read failures.
    """
    try:
        raw_body = http_response.read()
    except (httpx.StreamError, httpx.TransportError, OSError) as exc:
        raise BodyReadError(f"read response body error: {exc}") from exc
    finally:
        http_response.close()

    return Response(
        status_code=http_response.status_code,
        headers=httpx.Headers(http_response.headers.multi_items()),
        raw_body=raw_body,
        encoding=http_response.encoding or "utf-8",
    )


__all__ = ["Response", "parse_response"]
