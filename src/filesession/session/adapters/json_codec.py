# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""JSON session codec with a tagged envelope for non-JSON values."""

from __future__ import annotations

import base64
import json
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from filesession.kernel.exceptions import CorruptSessionDataException

_TYPE_KEY = "__type__"
_VALUE_KEY = "value"


def _tagged(tag: str, value: Any) -> dict[str, Any]:
    return {_TYPE_KEY: tag, _VALUE_KEY: value}


def _wrap(value: Any) -> Any:
    """Convert *value* into plain JSON types, tagging what JSON cannot express."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, dict):
        items = [(_check_key(k), _wrap(v)) for k, v in value.items()]
        if any(k == _TYPE_KEY for k, _ in items):
            # user dicts that look like an envelope are stored as pairs
            return _tagged("dict", [[k, v] for k, v in items])
        return dict(items)
    if isinstance(value, list):
        return [_wrap(v) for v in value]
    if isinstance(value, tuple):
        return _tagged("tuple", [_wrap(v) for v in value])
    if isinstance(value, frozenset):
        return _tagged("frozenset", [_wrap(v) for v in value])
    if isinstance(value, set):
        return _tagged("set", [_wrap(v) for v in value])
    if isinstance(value, bytes):
        return _tagged("bytes", base64.b64encode(value).decode("ascii"))
    if isinstance(value, datetime):
        return _tagged("datetime", value.isoformat())
    if isinstance(value, date):
        return _tagged("date", value.isoformat())
    raise TypeError(f"Session values of type {type(value).__name__} cannot be encoded")


def _check_key(key: Any) -> str:
    if not isinstance(key, str):
        raise TypeError(f"Session keys must be strings, got {type(key).__name__}")
    return key


_DECODERS: dict[str, Callable[[Any], Any]] = {
    "dict": lambda pairs: {k: v for k, v in pairs},
    "tuple": tuple,
    "set": set,
    "frozenset": frozenset,
    "bytes": lambda s: base64.b64decode(s.encode("ascii"), validate=True),
    "datetime": datetime.fromisoformat,
    "date": date.fromisoformat,
}


def _unwrap(obj: dict[str, Any]) -> Any:
    if obj.keys() == {_TYPE_KEY, _VALUE_KEY}:
        decoder = _DECODERS.get(obj[_TYPE_KEY])
        if decoder is not None:
            return decoder(obj[_VALUE_KEY])
    return obj


class JsonSessionCodec:
    """Encodes session mappings as UTF-8 JSON.

    Plain JSON values are stored as-is.  ``tuple``, ``set``, ``frozenset``,
    ``bytes``, ``datetime`` and ``date`` are stored as
    ``{"__type__": ..., "value": ...}`` objects and restored on decode.
    """

    def __init__(self, indent: int | None = None) -> None:
        self._indent = indent

    def encode(self, data: dict[str, Any]) -> bytes:
        if not isinstance(data, dict):
            raise TypeError(f"Session data must be a dict, got {type(data).__name__}")
        payload = _wrap(data)
        return json.dumps(payload, indent=self._indent, ensure_ascii=False, allow_nan=False).encode("utf-8")

    def decode(self, raw: bytes) -> dict[str, Any]:
        try:
            payload = json.loads(raw.decode("utf-8"), object_hook=_unwrap)
        except (ValueError, TypeError, AttributeError, RecursionError) as exc:
            # malformed envelopes fail inside the decoders, deep nesting inside json itself
            raise CorruptSessionDataException(f"Session payload cannot be decoded: {exc}") from exc
        if not isinstance(payload, dict):
            raise CorruptSessionDataException(
                "Session payload is not a JSON object",
                context={"payload_type": type(payload).__name__},
            )
        return payload
