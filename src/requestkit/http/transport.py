# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx transport construction: TLS context, client certificates and timeouts."""

from __future__ import annotations

import logging
import os
import ssl
import tempfile

import httpx

from ..config import ClientCertificate, ClientSettings
from ..errors import CertificateError

logger = logging.getLogger(__name__)


def _load_pem_certificate(context: ssl.SSLContext, certificate: ClientCertificate) -> None:
    # ssl can only load key material from disk.
    with tempfile.TemporaryDirectory(prefix="requestkit-") as tmpdir:
        cert_path = os.path.join(tmpdir, "client.crt")
        key_path = os.path.join(tmpdir, "client.key")
        with open(cert_path, "wb") as fh:
            fh.write(certificate.cert_pem or b"")
        with open(key_path, "wb") as fh:
            fh.write(certificate.key_pem or b"")
        context.load_cert_chain(certfile=cert_path, keyfile=key_path)


def load_client_certificate(context: ssl.SSLContext, certificate: ClientCertificate) -> None:
    """Add one client certificate to `context`, raising CertificateError on bad material."""
    source = "in-memory block" if certificate.in_memory else f"{certificate.cert_file}, {certificate.key_file}"
    try:
        if certificate.in_memory:
            _load_pem_certificate(context, certificate)
        else:
            context.load_cert_chain(certfile=certificate.cert_file, keyfile=certificate.key_file)
    except (ssl.SSLError, OSError, ValueError) as exc:
        raise CertificateError(f"load client certificate ({source}) error: {exc}") from exc


def build_ssl_context(settings: ClientSettings) -> ssl.SSLContext:
    """Create the TLS context for the default transport."""
    context = httpx.create_ssl_context(verify=not settings.skip_verify)
    for certificate in settings.client_certificates:
        load_client_certificate(context, certificate)
    return context


def build_timeout(settings: ClientSettings) -> httpx.Timeout:
    # 0 means no timeout, like None; httpx would fail every connect on it.
    return httpx.Timeout(settings.timeout or None)


def create_http_client(settings: ClientSettings, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    """
    Build the httpx.Client a requestkit Client sends through.

    A caller-supplied transport replaces the default one wholesale, so TLS settings cannot
    be applied to it.
    """
    if transport is None:
        transport = httpx.HTTPTransport(verify=build_ssl_context(settings))
    elif settings.client_certificates or settings.skip_verify:
        logger.warning("Custom transport supplied; client certificates and skip_verify are not applied to it")

    return httpx.Client(
        transport=transport,
        timeout=build_timeout(settings),
        follow_redirects=True,
        trust_env=False,
    )


__all__ = ["build_ssl_context", "build_timeout", "create_http_client", "load_client_certificate"]
