# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class RequestKitError(Exception):
    """Base class for every error raised by requestkit itself."""


class URLError(RequestKitError):
    """The request URL could not be joined from the base URL and path."""


class EncodingError(RequestKitError):
    """A request body could not be serialized, or a response body decoded."""


class CertificateError(RequestKitError):
    """Client certificate or key material is missing or malformed."""


class ContentTypeError(RequestKitError):
    """A JSON decode was attempted on a response that is not JSON."""

    def __init__(self, content_type: str):
        super().__init__(f"response content-type not json, it is {content_type!r}")
        self.content_type = content_type


class BodyReadError(RequestKitError, OSError):
    """The response body stream failed while being drained."""


class ConfigError(RequestKitError, ValueError):
    """Client settings are invalid; `problems` lists every issue found."""

    def __init__(self, problems: Iterable[str]):
        self.problems = list(problems)
        super().__init__("invalid client settings: " + "; ".join(self.problems))


class ErrorCategory(str, Enum):
    URL = "URL"
    ENCODING = "ENCODING"
    CERTIFICATE = "CERTIFICATE"
    CONFIG = "CONFIG"
    CONTENT_TYPE = "CONTENT_TYPE"
    BODY_READ = "BODY_READ"
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


_OWN_CATEGORIES: tuple[tuple[type[RequestKitError], ErrorCategory], ...] = (
    (URLError, ErrorCategory.URL),
    (EncodingError, ErrorCategory.ENCODING),
    (CertificateError, ErrorCategory.CERTIFICATE),
    (ConfigError, ErrorCategory.CONFIG),
    (ContentTypeError, ErrorCategory.CONTENT_TYPE),
    (BodyReadError, ErrorCategory.BODY_READ),
)


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map requestkit/httpx/Python exceptions to ErrorCategory.
    """
    import socket
    import ssl as ssl_module

    import httpx

    for exc_type, category in _OWN_CATEGORIES:
        if isinstance(exc, exc_type):
            return category

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    # httpx wraps TLS failures in ConnectError; look at the cause first.
    cause = exc.__cause__ or exc.__context__
    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)) or isinstance(
        cause, (ssl_module.SSLError, ssl_module.CertificateError)
    ):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)) or isinstance(cause, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, ConnectionError):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.URL: "Request URL could not be built",
        ErrorCategory.ENCODING: "Body encoding or decoding failed",
        ErrorCategory.CERTIFICATE: "Client certificate could not be loaded",
        ErrorCategory.CONFIG: "Invalid client settings",
        ErrorCategory.CONTENT_TYPE: "Response is not JSON",
        ErrorCategory.BODY_READ: "Response body could not be read",
        ErrorCategory.TIMEOUT: "Network timeout",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.UNKNOWN_ERROR: "Request failed",
        None: "",
    }
    return mapping.get(category, "Request failed")


__all__ = [
    "BodyReadError",
    "CertificateError",
    "ConfigError",
    "ContentTypeError",
    "EncodingError",
    "ErrorCategory",
    "RequestKitError",
    "URLError",
    "categorize_exception",
    "error_category_to_reason",
]
