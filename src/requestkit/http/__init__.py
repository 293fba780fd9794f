# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request building, sending and response parsing."""

from .client import Client
from .headers import build_headers, header_value
from .params import (
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_JSON_UTF8,
    BodyParams,
    EncodedBody,
    FormBodyParams,
    FormFile,
    JsonBodyParams,
    QueryParams,
)
from .request import Request
from .response import Response, parse_response
from .transport import build_ssl_context, create_http_client
from .url import build_base_url, join_path

__all__ = [
    "CONTENT_TYPE_JSON",
    "CONTENT_TYPE_JSON_UTF8",
    "BodyParams",
    "Client",
    "EncodedBody",
    "FormBodyParams",
    "FormFile",
    "JsonBodyParams",
    "QueryParams",
    "Request",
    "Response",
    "build_base_url",
    "build_headers",
    "build_ssl_context",
    "create_http_client",
    "header_value",
    "join_path",
    "parse_response",
]
