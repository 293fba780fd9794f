# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers used when building requests."""

from __future__ import annotations

import re
from urllib.parse import quote, urlsplit, urlunsplit

from ..errors import URLError

_INVALID_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
# RFC 3986 pchar plus "/" and "%" (escapes are validated separately).
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"


def build_base_url(scheme: str, host: str, port: int) -> str:
    """
    Format `scheme://host:port`.

    Example:
      ("http", "127.0.0.1", 8080) -> http://127.0.0.1:8080
    """
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    return f"{scheme}://{host}:{port}"


def clean_path(path: str) -> str:
    """
    Collapse duplicate separators and resolve `.`/`..` segments of an absolute path.

    `..` never climbs above the root.
    """
    segments: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)
    return "/" + "/".join(segments)


def join_path(base_url: str, path: str) -> str:
    """
    Join `path` onto the path of `base_url` and return the absolute URL.

    A trailing slash on `path` is preserved. A query string embedded in `path` is kept as the
    URL query; any fragment is dropped.
    """
    try:
        base = urlsplit(str(base_url or ""))
    except ValueError as exc:
        raise URLError(f"invalid base url {base_url!r}: {exc}") from exc
    if not base.scheme or not base.netloc:
        raise URLError(f"base url {base_url!r} needs a scheme and a host")

    raw_path, _, query = str(path or "").partition("?")
    query = query.partition("#")[0]
    raw_path = raw_path.partition("#")[0]

    for candidate in (base.path, raw_path):
        if _INVALID_ESCAPE_RE.search(candidate):
            raise URLError(f"invalid percent escape in path {candidate!r}")

    joined = clean_path(f"{base.path}/{raw_path}")
    if raw_path.endswith("/") and not joined.endswith("/"):
        joined += "/"

    return urlunsplit((base.scheme, base.netloc, quote(joined, safe=_PATH_SAFE), query, ""))


def replace_query(url: str, query: str) -> str:
    """Return `url` with its raw query string replaced by `query`."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


__all__ = ["build_base_url", "clean_path", "join_path", "replace_query"]
