# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Query parameter map and request body encoders (JSON, multipart/form-data)."""

from __future__ import annotations

import io
import json
import secrets
from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Protocol, Union
from urllib.parse import urlencode

from ..errors import EncodingError

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_JSON_UTF8 = f"{CONTENT_TYPE_JSON}; charset=UTF-8"
CONTENT_TYPE_MULTIPART = "multipart/form-data"
CONTENT_TYPE_OCTET_STREAM = "application/octet-stream"

_COPY_CHUNK_SIZE = 64 * 1024


class QueryParams(MutableMapping[str, list[str]]):
    """
    Ordered multi-value query parameters.

    Values keep their insertion order per key; `encode()` sorts keys so the
    produced query string is deterministic.
    """

    def __init__(self, params: Mapping[str, str] | None = None):
        self._values: dict[str, list[str]] = {}
        for key, value in (params or {}).items():
            self.set(key, value)

    def set(self, key: str, value: str) -> None:
        self._values[key] = [value]

    def add(self, key: str, value: str) -> None:
        self._values.setdefault(key, []).append(value)

    def get(self, key: str, default: Any = "") -> Any:  # type: ignore[override]
        """Return the first value for `key`, or "" when there is none."""
        values = self._values.get(key)
        if not values:
            return default
        return values[0]

    def get_list(self, key: str) -> list[str]:
        return list(self._values.get(key, []))

    def encode(self) -> str:
        pairs = [(key, value) for key in sorted(self._values) for value in self._values[key]]
        return urlencode(pairs)

    def __getitem__(self, key: str) -> list[str]:
        return self._values[key]

    def __setitem__(self, key: str, values: list[str]) -> None:
        self._values[key] = [str(v) for v in values]

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, QueryParams):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"QueryParams({self._values!r})"


@dataclass(frozen=True)
class EncodedBody:
    """A serialized request body with the content type required to transmit it."""

    content_type: str
    body: BinaryIO


class _Reader(Protocol):
    def read(self, size: int = -1) -> bytes | str: ...


FileSource = Union[bytes, bytearray, memoryview, str, _Reader]


@dataclass
class FormFile:
    field_name: str
    file_name: str
    reader: FileSource


def _json_key(key: object) -> str:
    if isinstance(key, str):
        return key
    if key is None or isinstance(key, (bool, int, float)):
        return json.dumps(key, allow_nan=False)
    raise TypeError(f"keys must be str, int, float, bool or None, not {type(key).__name__}")


def _with_string_keys(value: Any, active: set[int]) -> Any:
    """Copy nested containers, converting object keys the way json does, so keys of mixed types sort."""
    if not isinstance(value, (dict, list, tuple)):
        return value
    if id(value) in active:
        raise ValueError("Circular reference detected")
    active.add(id(value))
    try:
        if isinstance(value, dict):
            return {_json_key(key): _with_string_keys(item, active) for key, item in value.items()}
        return [_with_string_keys(item, active) for item in value]
    finally:
        active.discard(id(value))


def _json_dumps(value: object) -> bytes:
    value = _with_string_keys(value, set())
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False, allow_nan=False).encode("utf-8")


class JsonBodyParams:
    """Body encoder that serializes an arbitrary JSON-compatible value."""

    def __init__(self, params: Any):
        self.params = params

    def build(self) -> EncodedBody:
        try:
            data = _json_dumps(self.params)
        except (TypeError, ValueError, RecursionError) as exc:
            raise EncodingError(f"marshal error: {exc}") from exc
        return EncodedBody(content_type=CONTENT_TYPE_JSON_UTF8, body=io.BytesIO(data))

    def __repr__(self) -> str:
        return f"JsonBodyParams({self.params!r})"


def _escape_quotes(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _new_boundary() -> str:
    return f"----FormBoundary{secrets.token_hex(16)}"


def _copy_source(source: FileSource, out: io.BytesIO) -> None:
    if isinstance(source, (bytes, bytearray, memoryview)):
        out.write(source)
        return
    if isinstance(source, str):
        out.write(source.encode("utf-8"))
        return
    while True:
        chunk = source.read(_COPY_CHUNK_SIZE)
        if not chunk:
            return
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        elif not isinstance(chunk, (bytes, bytearray, memoryview)):
            raise TypeError(f"reader returned {type(chunk).__name__}, expected bytes")
        out.write(chunk)


@dataclass
class FormBodyParams:
    """
    Body encoder producing multipart/form-data.

    Scalar fields are written first, in insertion order, followed by every
    attached file in the order `add_file` was called.
    """

    params: dict[str, str] = field(default_factory=dict)
    files: list[FormFile] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.params is None:
            self.params = {}

    def add_file(self, field_name: str, file_name: str, reader: FileSource) -> None:
        if not isinstance(reader, (bytes, bytearray, memoryview, str)) and not callable(getattr(reader, "read", None)):
            raise TypeError("reader must be bytes, str or expose a read() method")
        self.files.append(FormFile(field_name=field_name, file_name=file_name, reader=reader))

    def build(self) -> EncodedBody:
        boundary = _new_boundary()
        buffer = io.BytesIO()
        delimiter = f"--{boundary}\r\n".encode("ascii")

        for name, value in self.params.items():
            buffer.write(delimiter)
            buffer.write(f'Content-Disposition: form-data; name="{_escape_quotes(str(name))}"\r\n\r\n'.encode())
            buffer.write(str(value).encode("utf-8"))
            buffer.write(b"\r\n")

        for form_file in self.files:
            buffer.write(delimiter)
            disposition = (
                f'Content-Disposition: form-data; name="{_escape_quotes(form_file.field_name)}"; '
                f'filename="{_escape_quotes(form_file.file_name)}"\r\n'
            )
            buffer.write(disposition.encode())
            buffer.write(f"Content-Type: {CONTENT_TYPE_OCTET_STREAM}\r\n\r\n".encode("ascii"))
            try:
                _copy_source(form_file.reader, buffer)
            except (OSError, ValueError, TypeError) as exc:
                raise EncodingError(f"write file {form_file.file_name!r} for field {form_file.field_name!r} error: {exc}") from exc
            buffer.write(b"\r\n")

        buffer.write(f"--{boundary}--\r\n".encode("ascii"))
        buffer.seek(0)
        return EncodedBody(content_type=f"{CONTENT_TYPE_MULTIPART}; boundary={boundary}", body=buffer)


BodyParams = Union[JsonBodyParams, FormBodyParams]


__all__ = [
    "CONTENT_TYPE_JSON",
    "CONTENT_TYPE_JSON_UTF8",
    "CONTENT_TYPE_MULTIPART",
    "CONTENT_TYPE_OCTET_STREAM",
    "BodyParams",
    "EncodedBody",
    "FormBodyParams",
    "FormFile",
    "JsonBodyParams",
    "QueryParams",
]
