# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header set helpers.

HTTP header field names are case-insensitive (RFC 9110) and may repeat. requestkit keeps
header sets as `httpx.Headers`, which preserves both properties; these helpers accept the
looser shapes callers tend to pass in (plain dicts, lists of pairs) and read values the
same way regardless of container.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Union

import httpx

CONTENT_TYPE_HEADER = "Content-Type"
HOST_HEADER = "Host"

HeaderTypes = Union[httpx.Headers, Mapping[str, str], Iterable[tuple[str, str]]]


def build_headers(headers: HeaderTypes | None = None) -> httpx.Headers:
    """
    Return a fresh `httpx.Headers` copied from any supported header container.

    Mappings are applied with set semantics (one value per name); iterables of
    pairs and `httpx.Headers` keep every repeated value.
    """
    if not headers:
        return httpx.Headers()
    if isinstance(headers, httpx.Headers):
        return httpx.Headers(headers.multi_items())
    if isinstance(headers, Mapping):
        out = httpx.Headers()
        for key, value in headers.items():
            out[str(key)] = _coerce_value(value)
        return out
    return httpx.Headers([(str(key), _coerce_value(value)) for key, value in headers])


def append_header(headers: httpx.Headers, name: str, value: str) -> httpx.Headers:
    """Return a copy of `headers` with one more value for `name`."""
    return httpx.Headers([*headers.multi_items(), (name, _coerce_value(value))])


def _coerce_value(value: Any) -> str:
    return "" if value is None else str(value)


def header_value(headers: HeaderTypes | None, name: str, default: str = "") -> str:
    """
    Return the first value of header `name` using case-insensitive matching.
    """
    if not headers or not name:
        return default

    if isinstance(headers, httpx.Headers):
        values = headers.get_list(name)
        return values[0] if values else default

    lower = name.lower()
    items = headers.items() if isinstance(headers, Mapping) else headers
    for key, value in items:
        if key is not None and str(key).lower() == lower:
            return default if value is None else str(value)
    return default


def has_header(headers: HeaderTypes | None, name: str) -> bool:
    """Return True when `name` is present with a non-empty first value."""
    return header_value(headers, name) != ""


__all__ = [
    "CONTENT_TYPE_HEADER",
    "HOST_HEADER",
    "HeaderTypes",
    "append_header",
    "build_headers",
    "has_header",
    "header_value",
]
