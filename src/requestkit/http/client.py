# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Client configuration bound to one host, and the `do` pipeline."""

from __future__ import annotations

import logging

import httpx

from ..config import ClientSettings
from .request import Request
from .response import Response, parse_response
from .transport import build_timeout, create_http_client
from .url import build_base_url

logger = logging.getLogger(__name__)

SNI_HOSTNAME_EXTENSION = "sni_hostname"
TIMEOUT_EXTENSION = "timeout"


class Client:
    """
    Sends Requests to `scheme://host:port` over an owned httpx.Client.

    Settings are validated once here and are read-only afterwards. `do` may be called
    from several threads at once; Requests must not be shared between calls.
    """

    def __init__(
        self,
        host: str,
        settings: ClientSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ):
        settings = settings or ClientSettings()
        settings.validate(host)
        self._host = host
        self._settings = settings
        self._timeout = build_timeout(settings)
        self._client = create_http_client(settings, transport)

    @property
    def host(self) -> str:
        return self._host

    @property
    def scheme(self) -> str:
        return self._settings.scheme

    @property
    def port(self) -> int:
        return self._settings.port

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def base_url(self) -> str:
        return build_base_url(self._settings.scheme, self._host, self._settings.port)

    def do(self, request: Request) -> Response:
        """Build `request` against the base URL, send it and buffer the response."""
        http_request = request.build(self.base_url)
        # send() skips build_request(), so the client timeout has to be attached here.
        http_request.extensions.setdefault(TIMEOUT_EXTENSION, self._timeout.as_dict())
        if self._settings.tls_server_name:
            http_request.extensions[SNI_HOSTNAME_EXTENSION] = self._settings.tls_server_name

        logger.debug("Sending %s %s", http_request.method, http_request.url)
        http_response = self._client.send(http_request, stream=True)
        logger.debug("Received %s for %s %s", http_response.status_code, http_request.method, http_request.url)
        return parse_response(http_response)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()

    def __repr__(self) -> str:
        return f"Client(base_url={self.base_url!r})"


__all__ = ["Client"]
