# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
requestkit package entrypoint.

A small convenience layer over httpx: a client bound to one host with its TLS and
timeout settings, a request descriptor that assembles path, headers, query parameters
and a JSON or multipart body, and a buffered response with a JSON decode helper.
"""

from .config import ClientCertificate, ClientSettings, load_client_settings
from .errors import (
    BodyReadError,
    CertificateError,
    ConfigError,
    ContentTypeError,
    EncodingError,
    RequestKitError,
    URLError,
)
from .http import (
    Client,
    FormBodyParams,
    JsonBodyParams,
    QueryParams,
    Request,
    Response,
)
from .log import setup_logging
from .version import __version__

__all__ = [
    "BodyReadError",
    "CertificateError",
    "Client",
    "ClientCertificate",
    "ClientSettings",
    "ConfigError",
    "ContentTypeError",
    "EncodingError",
    "FormBodyParams",
    "JsonBodyParams",
    "QueryParams",
    "Request",
    "RequestKitError",
    "Response",
    "URLError",
    "load_client_settings",
    "setup_logging",
    "__version__",
]
