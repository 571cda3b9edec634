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
"""Tests for the JSON and pickle session serializers."""

from __future__ import annotations

import datetime

import pytest

from redistore.kernel.exceptions import NonStringKeyError, SerializationError
from redistore.session.ports.outbound import Serializer
from redistore.session.serializers import JsonSerializer, PickleSerializer, get_serializer
from redistore.session.session import Session


def _session(values: dict | None = None) -> Session:
    session = Session(store=None, name="sess")  # type: ignore[arg-type]
    session.values.update(values or {})
    return session


class TestJsonSerializer:
    def test_round_trip(self):
        serializer = JsonSerializer()
        values = {"a": 1, "b": "x", "nested": {"list": [1, 2.5, None, True]}}
        restored = _session()
        serializer.deserialize(serializer.serialize(_session(values)), restored)
        assert restored.values == values

    def test_output_is_readable_json(self):
        assert JsonSerializer().serialize(_session({"a": 1})) == b'{"a":1}'

    def test_rejects_non_string_key(self):
        with pytest.raises(NonStringKeyError) as exc_info:
            JsonSerializer().serialize(_session({"a": 1, 2: "two"}))
        assert exc_info.value.key == 2

    def test_non_string_key_is_serialization_error(self):
        with pytest.raises(SerializationError):
            JsonSerializer().serialize(_session({("tuple",): 1}))

    def test_rejects_unencodable_value(self):
        with pytest.raises(SerializationError):
            JsonSerializer().serialize(_session({"when": datetime.datetime.now()}))

    def test_deserialize_merges_into_existing_values(self):
        session = _session({"kept": True})
        JsonSerializer().deserialize(b'{"a":1}', session)
        assert session.values == {"kept": True, "a": 1}

    def test_deserialize_invalid_payload(self):
        with pytest.raises(SerializationError):
            JsonSerializer().deserialize(b"{not json", _session())

    def test_deserialize_non_object(self):
        with pytest.raises(SerializationError):
            JsonSerializer().deserialize(b"[1, 2]", _session())


class TestPickleSerializer:
    def test_round_trip_exact_types(self):
        serializer = PickleSerializer()
        values = {
            "a": 1,
            2: "int key",
            ("t", 1): {1, 2},
            "when": datetime.datetime(2024, 1, 2, 3, 4, 5),
            "raw": b"\x00\x01",
        }
        restored = _session()
        serializer.deserialize(serializer.serialize(_session(values)), restored)
        assert restored.values == values

    def test_accepts_non_string_keys(self):
        assert PickleSerializer().serialize(_session({1: "one"}))

    def test_unpicklable_value(self):
        with pytest.raises(SerializationError):
            PickleSerializer().serialize(_session({"fn": lambda: None}))

    def test_deserialize_garbage(self):
        with pytest.raises(SerializationError):
            PickleSerializer().deserialize(b"garbage", _session())


class TestGetSerializer:
    def test_known_names(self):
        assert isinstance(get_serializer("json"), JsonSerializer)
        assert isinstance(get_serializer("PICKLE"), PickleSerializer)
        assert isinstance(get_serializer("json"), Serializer)

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            get_serializer("xml")
