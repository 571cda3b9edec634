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
"""Tests for RedisStore load/save/delete semantics."""

from __future__ import annotations

from http.cookies import SimpleCookie

import pytest
from starlette.datastructures import State
from starlette.responses import Response

from redistore.cache.adapters.memory import InMemoryCacheGateway
from redistore.kernel.exceptions import (
    CacheError,
    ConstructionError,
    CookieDecodeError,
    CookieEncodeError,
    NonStringKeyError,
    PayloadTooLargeError,
    SerializationError,
)
from redistore.security.cookie import SecureCookie, codecs_from_pairs, encode_multi
from redistore.session.ports.outbound import SessionStore
from redistore.session.serializers import JsonSerializer
from redistore.session.session import Session, SessionOptions
from redistore.session.store import RedisStore


class FakeRequest:
    def __init__(self, cookies: dict[str, str] | None = None) -> None:
        self.cookies = cookies or {}
        self.state = State()


class RecordingGateway(InMemoryCacheGateway):
    """In-memory gateway that records every operation it receives."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, str | None, float | None]] = []

    async def get(self, key, *, timeout=None):
        self.calls.append(("get", key, timeout))
        return await super().get(key, timeout=timeout)

    async def set(self, key, payload, ttl, *, timeout=None):
        self.calls.append(("set", key, timeout))
        await super().set(key, payload, ttl, timeout=timeout)

    async def delete(self, key, *, timeout=None):
        self.calls.append(("delete", key, timeout))
        await super().delete(key, timeout=timeout)

    def ops(self) -> list[str]:
        return [op for op, _, _ in self.calls]


class FailingGateway(InMemoryCacheGateway):
    def __init__(self, fail_on: str) -> None:
        super().__init__()
        self._fail_on = fail_on

    async def get(self, key, *, timeout=None):
        if self._fail_on == "get":
            raise CacheError("read failed", "get", key)
        return await super().get(key, timeout=timeout)

    async def set(self, key, payload, ttl, *, timeout=None):
        if self._fail_on == "set":
            raise CacheError("write failed", "set", key)
        await super().set(key, payload, ttl, timeout=timeout)

    async def ping(self, *, timeout=None):
        if self._fail_on == "ping":
            raise CacheError("unreachable", "ping")


def _store(gateway: InMemoryCacheGateway | None = None, *keys: bytes) -> RedisStore:
    return RedisStore(gateway or RecordingGateway(), codecs_from_pairs(*(keys or (b"k1",))))


def _set_cookies(response: Response) -> list[SimpleCookie]:
    cookies = []
    for header in response.headers.getlist("set-cookie"):
        cookie: SimpleCookie = SimpleCookie()
        cookie.load(header)
        cookies.append(cookie)
    return cookies


async def _saved_cookie(store: RedisStore, session: Session) -> str:
    response = Response()
    await store.save(FakeRequest(), response, session)
    return _set_cookies(response)[0][session.name].value


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_pings_gateway(self):
        store = await RedisStore.create(InMemoryCacheGateway(), b"k1")
        assert isinstance(store, SessionStore)
        assert store.key_prefix == "gosession_"
        assert store.max_length == 4096
        assert store.default_max_age == 1200
        assert store.options.path == "/"
        assert store.options.max_age == 86400 * 30
        assert len(store.codecs) == 1

    @pytest.mark.asyncio
    async def test_unreachable_cache_is_fatal(self):
        with pytest.raises(ConstructionError) as exc_info:
            await RedisStore.create(FailingGateway("ping"), b"k1")
        assert isinstance(exc_info.value.__cause__, CacheError)

    @pytest.mark.asyncio
    async def test_redis_client_is_wrapped(self):
        from redis.asyncio import Redis

        client = Redis(host="127.0.0.1", port=1)
        try:
            with pytest.raises(ConstructionError):
                await RedisStore.create(client, b"k1", ping_timeout=1)
        finally:
            await client.aclose()


class TestLoad:
    @pytest.mark.asyncio
    async def test_no_cookie_yields_new_session(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        await gateway.set("gosession_", b"\x80\x04}\x94.", 60)
        session = await store.new(FakeRequest(), "sess")
        assert session.is_new is True
        assert session.values == {}
        assert session.id == ""
        assert session.load_error is None
        assert gateway.ops() == ["set"]

    @pytest.mark.asyncio
    async def test_session_options_are_copied(self):
        store = _store()
        session = await store.new(FakeRequest(), "sess")
        session.options.max_age = 5
        assert store.options.max_age == 86400 * 30

    @pytest.mark.asyncio
    async def test_cache_miss_yields_new_session(self):
        store = _store()
        token = encode_multi("sess", "unknown-id", store.codecs)
        session = await store.new(FakeRequest({"sess": token}), "sess")
        assert session.is_new is True
        assert session.id == "unknown-id"
        assert session.load_error is None

    @pytest.mark.asyncio
    async def test_empty_payload_yields_new_session(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        await gateway.set("gosession_abc", b"", 60)
        token = encode_multi("sess", "abc", store.codecs)
        session = await store.new(FakeRequest({"sess": token}), "sess")
        assert session.is_new is True

    @pytest.mark.asyncio
    async def test_tampered_cookie_is_rejected_without_cache_read(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        session = Session(store, "sess", options=store.options.copy())
        session.values["a"] = 1
        token = await _saved_cookie(store, session)
        gateway.calls.clear()

        tampered = ("B" if token[0] == "A" else "A") + token[1:]
        loaded = await store.new(FakeRequest({"sess": tampered}), "sess")

        assert loaded.is_new is True
        assert loaded.values == {}
        assert loaded.id == ""
        assert isinstance(loaded.load_error, CookieDecodeError)
        assert gateway.ops() == []

    @pytest.mark.asyncio
    async def test_cache_read_error_propagates(self):
        store = _store(FailingGateway("get"))
        token = encode_multi("sess", "abc", store.codecs)
        with pytest.raises(CacheError):
            await store.new(FakeRequest({"sess": token}), "sess")

    @pytest.mark.asyncio
    async def test_corrupt_payload_propagates(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        await gateway.set("gosession_abc", b"garbage", 60)
        token = encode_multi("sess", "abc", store.codecs)
        with pytest.raises(SerializationError):
            await store.new(FakeRequest({"sess": token}), "sess")

    @pytest.mark.asyncio
    async def test_timeout_is_forwarded(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        store.set_timeout(2.5)
        token = encode_multi("sess", "abc", store.codecs)
        await store.new(FakeRequest({"sess": token}), "sess")
        assert gateway.calls == [("get", "gosession_abc", 2.5)]


class TestSave:
    @pytest.mark.asyncio
    async def test_save_then_load(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        session = await store.new(FakeRequest(), "sess")
        session.values.update({"a": 1, "b": "x"})
        token = await _saved_cookie(store, session)

        assert session.id
        assert f"gosession_{session.id}" in gateway

        loaded = await store.new(FakeRequest({"sess": token}), "sess")
        assert loaded.is_new is False
        assert loaded.id == session.id
        assert loaded.values == {"a": 1, "b": "x"}

    @pytest.mark.asyncio
    async def test_existing_id_is_kept(self):
        store = _store()
        session = Session(store, "sess")
        session.id = "fixed-id"
        await _saved_cookie(store, session)
        assert session.id == "fixed-id"

    @pytest.mark.asyncio
    async def test_cookie_carries_options(self):
        store = _store()
        session = Session(
            store,
            "sess",
            options=SessionOptions(path="/app", domain="example.com", max_age=300, secure=True, http_only=True),
        )
        session.values["a"] = 1
        response = Response()
        await store.save(FakeRequest(), response, session)
        morsel = _set_cookies(response)[0]["sess"]
        assert morsel["path"] == "/app"
        assert morsel["domain"] == "example.com"
        assert morsel["max-age"] == "300"
        assert morsel["secure"] is True
        assert morsel["httponly"] is True

    @pytest.mark.asyncio
    async def test_ttl_follows_session_max_age(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        session = Session(store, "sess", options=SessionOptions(max_age=90))
        session.values["a"] = 1
        await _saved_cookie(store, session)
        assert gateway.ttl(f"gosession_{session.id}") == 90

    @pytest.mark.asyncio
    async def test_unset_max_age_uses_store_default(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        store.default_max_age = 42
        session = Session(store, "sess", options=SessionOptions(max_age=None))
        session.values["a"] = 1
        response = Response()
        await store.save(FakeRequest(), response, session)
        assert gateway.ttl(f"gosession_{session.id}") == 42
        assert _set_cookies(response)[0]["sess"]["max-age"] == ""

    @pytest.mark.asyncio
    async def test_payload_over_limit_is_rejected(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        store.set_serializer(JsonSerializer())
        session = Session(store, "sess")
        session.values["v"] = "x" * 10
        limit = len(JsonSerializer().serialize(session)) - 1
        store.set_max_length(limit)

        response = Response()
        with pytest.raises(PayloadTooLargeError) as exc_info:
            await store.save(FakeRequest(), response, session)

        assert exc_info.value.size == limit + 1
        assert gateway.ops() == []
        assert f"gosession_{session.id}" not in gateway
        assert response.headers.getlist("set-cookie") == []

    @pytest.mark.asyncio
    async def test_oversized_cookie_token_writes_nothing(self):
        gateway = RecordingGateway()
        store = RedisStore(gateway, [SecureCookie(b"k1").max_length(10)])
        session = Session(store, "sess")
        session.values["a"] = 1

        response = Response()
        with pytest.raises(CookieEncodeError):
            await store.save(FakeRequest(), response, session)

        assert gateway.ops() == []
        assert response.headers.getlist("set-cookie") == []

    @pytest.mark.asyncio
    async def test_payload_over_limit_leaves_previous_entry(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        session = Session(store, "sess")
        session.values["v"] = "small"
        await _saved_cookie(store, session)
        key = f"gosession_{session.id}"
        before = await gateway.get(key)

        store.set_max_length(len(before))
        session.values["v"] = "x" * 100
        with pytest.raises(PayloadTooLargeError):
            await store.save(FakeRequest(), Response(), session)
        assert await gateway.get(key) == before

    @pytest.mark.asyncio
    async def test_payload_at_limit_is_accepted(self):
        store = _store()
        store.set_serializer(JsonSerializer())
        session = Session(store, "sess")
        session.values["v"] = "x" * 10
        store.set_max_length(len(JsonSerializer().serialize(session)))
        await _saved_cookie(store, session)

    @pytest.mark.asyncio
    async def test_zero_max_length_disables_limit(self):
        store = _store()
        store.set_max_length(0)
        session = Session(store, "sess")
        session.values["v"] = "x" * 10_000
        await _saved_cookie(store, session)

    def test_negative_max_length_is_ignored(self):
        store = _store()
        store.set_max_length(-1)
        assert store.max_length == 4096

    @pytest.mark.asyncio
    async def test_serialization_error_writes_nothing(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        store.set_serializer(JsonSerializer())
        session = Session(store, "sess")
        session.values[1] = "int key"
        with pytest.raises(NonStringKeyError):
            await store.save(FakeRequest(), Response(), session)
        assert gateway.ops() == []

    @pytest.mark.asyncio
    async def test_cache_write_error_sets_no_cookie(self):
        store = _store(FailingGateway("set"))
        session = Session(store, "sess")
        session.values["a"] = 1
        response = Response()
        with pytest.raises(CacheError):
            await store.save(FakeRequest(), response, session)
        assert response.headers.getlist("set-cookie") == []

    @pytest.mark.asyncio
    async def test_key_prefix(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        store.set_key_prefix("app:")
        session = Session(store, "sess")
        session.values["a"] = 1
        await _saved_cookie(store, session)
        assert f"app:{session.id}" in gateway


class TestDelete:
    @pytest.mark.asyncio
    async def test_zero_max_age_deletes_entry_and_expires_cookie(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        session = Session(store, "sess")
        session.values["a"] = 1
        await _saved_cookie(store, session)
        key = f"gosession_{session.id}"
        assert key in gateway

        session.options.max_age = 0
        response = Response()
        await store.save(FakeRequest(), response, session)

        assert key not in gateway
        morsel = _set_cookies(response)[0]["sess"]
        assert morsel.value == ""
        assert morsel["max-age"] == "0"

    @pytest.mark.asyncio
    async def test_negative_max_age_expires_in_the_past(self):
        store = _store()
        session = Session(store, "sess", options=SessionOptions(max_age=-1))
        session.id = "abc"
        response = Response()
        await store.save(FakeRequest(), response, session)
        morsel = _set_cookies(response)[0]["sess"]
        assert morsel.value == ""
        assert morsel["max-age"] == "0"
        assert "1970" in morsel["expires"]

    @pytest.mark.asyncio
    async def test_store_default_max_age_alone_triggers_delete(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        store.default_max_age = 0
        session = Session(store, "sess", options=SessionOptions(max_age=None))
        session.id = "abc"
        await gateway.set("gosession_abc", b"payload", 60)

        response = Response()
        await store.save(FakeRequest(), response, session)

        assert "gosession_abc" not in gateway
        morsel = _set_cookies(response)[0]["sess"]
        assert morsel.value == ""
        assert morsel["max-age"] == "0"
        assert morsel["expires"] == ""

    @pytest.mark.asyncio
    async def test_negative_store_default_expires_in_the_past(self):
        store = _store()
        store.default_max_age = -1
        session = Session(store, "sess", options=SessionOptions(max_age=None))
        response = Response()
        await store.save(FakeRequest(), response, session)
        morsel = _set_cookies(response)[0]["sess"]
        assert morsel["max-age"] == "0"
        assert "1970" in morsel["expires"]

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        session = Session(store, "sess", options=SessionOptions(max_age=0))
        session.id = "abc"
        await gateway.set("gosession_abc", b"payload", 60)

        await store.save(FakeRequest(), Response(), session)
        await store.save(FakeRequest(), Response(), session)

        assert gateway.ops().count("delete") == 2
        assert "gosession_abc" not in gateway

    @pytest.mark.asyncio
    async def test_delete_without_id_skips_cache(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        session = Session(store, "sess", options=SessionOptions(max_age=0))
        await store.save(FakeRequest(), Response(), session)
        assert gateway.ops() == []
        assert session.id == ""


class TestKeyRotation:
    @pytest.mark.asyncio
    async def test_cookie_from_old_key_still_loads(self):
        gateway = RecordingGateway()
        old_store = _store(gateway, b"old")
        session = Session(old_store, "sess")
        session.values["a"] = 1
        token = await _saved_cookie(old_store, session)

        rotated = _store(gateway, b"new", b"", b"old")
        loaded = await rotated.new(FakeRequest({"sess": token}), "sess")
        assert loaded.is_new is False
        assert loaded.values == {"a": 1}


class TestSetMaxAge:
    def test_updates_options_and_codecs(self, monkeypatch):
        store = _store()
        seen: list[int] = []
        monkeypatch.setattr(SecureCookie, "max_age", lambda self, v: seen.append(v) or self)
        store.set_max_age(600)
        assert store.options.max_age == 600
        assert seen == [600]

    def test_non_secure_cookie_codec_is_skipped(self):
        class PlainCodec:
            def encode(self, name, value):
                return value

            def decode(self, name, token):
                return token

        store = RedisStore(InMemoryCacheGateway(), [PlainCodec()])
        store.set_max_age(600)
        assert store.options.max_age == 600


class TestSessionHelpers:
    @pytest.mark.asyncio
    async def test_flashes_are_consumed(self):
        store = _store()
        session = await store.new(FakeRequest(), "sess")
        assert session.flashes() == []
        session.add_flash("hello")
        session.add_flash("world")
        session.add_flash("pong", "ping")
        token = await _saved_cookie(store, session)

        loaded = await store.new(FakeRequest({"sess": token}), "sess")
        assert loaded.flashes() == ["hello", "world"]
        assert loaded.flashes() == []
        assert loaded.flashes("ping") == ["pong"]

    @pytest.mark.asyncio
    async def test_session_save_delegates_to_store(self):
        gateway = RecordingGateway()
        store = _store(gateway)
        session = await store.new(FakeRequest(), "sess")
        session.values["a"] = 1
        response = Response()
        await session.save(FakeRequest(), response)
        assert session.store is store
        assert f"gosession_{session.id}" in gateway
        assert len(response.headers.getlist("set-cookie")) == 1
