# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Outgoing request descriptor and its build pipeline."""

from __future__ import annotations

import logging

import httpx

from ..errors import EncodingError, URLError
from .headers import CONTENT_TYPE_HEADER, HOST_HEADER, HeaderTypes, append_header, build_headers, has_header
from .params import BodyParams, QueryParams
from .url import join_path, replace_query

logger = logging.getLogger(__name__)


class Request:
    """
    Method, path, headers, query parameters and body for one call to `Client.do`.

    Instances are single-use: body readers are consumed by `build()` and are not
    rewound, so build a new Request for every call.
    """

    def __init__(
        self,
        method: str,
        path: str,
        *,
        host: str = "",
        headers: HeaderTypes | None = None,
        query_params: QueryParams | None = None,
        body_params: BodyParams | None = None,
    ):
        self.method = method
        self.path = path
        self.host = host
        self.headers: httpx.Headers = build_headers(headers)
        self.query_params = query_params
        self.body_params = body_params

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def add_header(self, name: str, value: str) -> None:
        self.headers = append_header(self.headers, name, value)

    def build(self, base_url: str) -> httpx.Request:
        """
        Produce the `httpx.Request` for this descriptor rooted at `base_url`.

        The body encoder's content type is only applied when the caller already set a
        Content-Type header; otherwise it is dropped and no Content-Type is sent.
        """
        url = join_path(base_url, self.path)

        content: bytes | None = None
        if self.body_params is not None:
            try:
                encoded = self.body_params.build()
            except EncodingError as exc:
                raise EncodingError(f"build body params error: {exc}") from exc
            try:
                content = encoded.body.read()
            except OSError as exc:
                raise EncodingError(f"read body params error: {exc}") from exc
            if encoded.content_type and has_header(self.headers, CONTENT_TYPE_HEADER):
                self.headers[CONTENT_TYPE_HEADER] = encoded.content_type

        if self.query_params:
            url = replace_query(url, self.query_params.encode())

        headers = build_headers(self.headers)
        if self.host:
            headers[HOST_HEADER] = self.host

        try:
            request = httpx.Request(self.method, url, headers=headers, content=content)
        except (httpx.InvalidURL, ValueError) as exc:
            raise URLError(f"new http request error: {exc}") from exc

        logger.debug("Built request %s %s (%d body bytes)", request.method, request.url, len(content or b""))
        return request

    def __repr__(self) -> str:
        return f"Request(method={self.method!r}, path={self.path!r}, host={self.host!r})"


__all__ = ["Request"]
