# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration records and defaults for requestkit clients."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace

from .errors import ConfigError
from .version import __version__

DEFAULT_SCHEME = "https"
DEFAULT_PORT = 443
DEFAULT_TIMEOUT: float | None = None
DEFAULT_USER_AGENT = f"requestkit/{__version__}"

MAX_PORT = 65535
SUPPORTED_SCHEMES = frozenset({"http", "https"})


def _float_env(name: str, default: float | None) -> float | None:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ClientCertificate:
    """
    PEM client certificate and private key for mutual TLS.

    Exactly one representation is populated: in-memory PEM blocks
    (`cert_pem`/`key_pem`) or paths on disk (`cert_file`/`key_file`).
    """

    cert_pem: bytes | None = None
    key_pem: bytes | None = None
    cert_file: str | None = None
    key_file: str | None = None

    @classmethod
    def from_pem(cls, cert_pem: bytes | str, key_pem: bytes | str) -> ClientCertificate:
        if isinstance(cert_pem, str):
            cert_pem = cert_pem.encode("ascii")
        if isinstance(key_pem, str):
            key_pem = key_pem.encode("ascii")
        return cls(cert_pem=cert_pem, key_pem=key_pem)

    @classmethod
    def from_files(cls, cert_file: str | os.PathLike[str], key_file: str | os.PathLike[str]) -> ClientCertificate:
        return cls(cert_file=os.fspath(cert_file), key_file=os.fspath(key_file))

    @property
    def in_memory(self) -> bool:
        return self.cert_pem is not None


@dataclass(frozen=True)
class ClientSettings:
    """Connection settings shared by every request a Client sends."""

    scheme: str = DEFAULT_SCHEME
    port: int = DEFAULT_PORT
    timeout: float | None = DEFAULT_TIMEOUT
    tls_server_name: str | None = None
    skip_verify: bool = False
    client_certificates: tuple[ClientCertificate, ...] = field(default_factory=tuple)

    def with_client_certificate(self, certificate: ClientCertificate) -> ClientSettings:
        """Return a copy with one more client certificate appended."""
        return replace(self, client_certificates=(*self.client_certificates, certificate))

    def problems(self, host: str) -> list[str]:
        """List every reason these settings cannot be used to reach `host`."""
        found: list[str] = []
        if not host:
            found.append("host must not be empty")
        if self.scheme not in SUPPORTED_SCHEMES:
            found.append(f"unsupported scheme {self.scheme!r}")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 <= self.port <= MAX_PORT:
            found.append(f"port must be an integer between 0 and {MAX_PORT}, got {self.port!r}")
        if self.timeout is not None and self.timeout < 0:
            found.append(f"timeout must be non-negative, got {self.timeout!r}")
        for index, certificate in enumerate(self.client_certificates):
            if certificate.in_memory:
                if not certificate.key_pem:
                    found.append(f"client certificate {index} has no key")
            elif not (certificate.cert_file and certificate.key_file):
                found.append(f"client certificate {index} needs both a certificate and a key")
        return found

    def validate(self, host: str) -> None:
        """Raise ConfigError listing every problem found."""
        found = self.problems(host)
        if found:
            raise ConfigError(found)

    @classmethod
    def from_env(cls) -> ClientSettings:
        """Create settings from environment variables (evaluated at call time)."""
        server_name = os.getenv("REQUESTKIT_TLS_SERVER_NAME") or None
        return cls(
            scheme=os.getenv("REQUESTKIT_SCHEME", DEFAULT_SCHEME),
            port=_int_env("REQUESTKIT_PORT", DEFAULT_PORT),
            timeout=_float_env("REQUESTKIT_TIMEOUT", DEFAULT_TIMEOUT),
            tls_server_name=server_name,
            skip_verify=_bool_env("REQUESTKIT_SKIP_VERIFY", False),
        )


def load_client_settings() -> ClientSettings:
    """Load client settings from environment with the library defaults."""
    return ClientSettings.from_env()


__all__ = [
    "DEFAULT_PORT",
    "DEFAULT_SCHEME",
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
    "ClientCertificate",
    "ClientSettings",
    "load_client_settings",
]
