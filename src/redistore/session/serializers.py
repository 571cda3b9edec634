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
"""Session value serializers.

Two strategies are provided:

* :class:`JsonSerializer` — human-readable, portable, string keys only.
* :class:`PickleSerializer` — compact and exact for any picklable value,
  but private to Python. Payloads are only ever read back from the
  server-side cache, never from the client.
"""

from __future__ import annotations

import json
import pickle
from typing import Any

from redistore.kernel.exceptions import NonStringKeyError, SerializationError
from redistore.session.ports.outbound import Serializer
from redistore.session.session import Session


class JsonSerializer:
    """Serializes session values as a JSON object."""

    def serialize(self, session: Session) -> bytes:
        data: dict[str, Any] = {}
        for key, value in session.values.items():
            if not isinstance(key, str):
                raise NonStringKeyError(key)
            data[key] = value
        try:
            return json.dumps(data, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Cannot serialize session to JSON: {exc}") from exc

    def deserialize(self, data: bytes, session: Session) -> None:
        try:
            decoded = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SerializationError(f"Cannot deserialize session from JSON: {exc}") from exc
        if not isinstance(decoded, dict):
            raise SerializationError("Cannot deserialize session from JSON: payload is not an object")
        session.values.update(decoded)


class PickleSerializer:
    """Serializes the whole session value mapping with :mod:`pickle`."""

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL) -> None:
        self._protocol = protocol

    def serialize(self, session: Session) -> bytes:
        try:
            return pickle.dumps(session.values, protocol=self._protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as exc:
            raise SerializationError(f"Cannot pickle session values: {exc}") from exc

    def deserialize(self, data: bytes, session: Session) -> None:
        try:
            decoded = pickle.loads(data)  # noqa: S301
        except Exception as exc:
            raise SerializationError(f"Cannot unpickle session values: {exc}") from exc
        if not isinstance(decoded, dict):
            raise SerializationError("Cannot unpickle session values: payload is not a mapping")
        session.values.update(decoded)


_SERIALIZERS: dict[str, type[JsonSerializer] | type[PickleSerializer]] = {
    "json": JsonSerializer,
    "pickle": PickleSerializer,
}


def get_serializer(name: str) -> Serializer:
    """Return a serializer instance for a configured strategy name."""
    try:
        return _SERIALIZERS[name.lower()]()
    except KeyError:
        raise ValueError(f"Unknown session serializer '{name}', expected one of {sorted(_SERIALIZERS)}") from None
