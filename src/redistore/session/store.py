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
"""RedisStore — server-side sessions in a key-value cache, identified by a signed cookie."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import structlog
from redis.asyncio import Redis

from redistore.cache.adapters.redis import RedisCacheGateway
from redistore.cache.ports.outbound import CacheGateway
from redistore.kernel.exceptions import CacheError, ConstructionError, CookieDecodeError, PayloadTooLargeError
from redistore.security.cookie import CookieCodec, SecureCookie, codecs_from_pairs, decode_multi, encode_multi
from redistore.security.tokens import new_session_id
from redistore.session.ports.outbound import Serializer
from redistore.session.registry import get_registry
from redistore.session.serializers import PickleSerializer
from redistore.session.session import Session, SessionOptions

logger = structlog.get_logger("redistore.session.store")

DEFAULT_KEY_PREFIX = "gosession_"
DEFAULT_MAX_AGE = 60 * 20
DEFAULT_MAX_LENGTH = 4096
DEFAULT_PING_TIMEOUT = 5.0

_EPOCH = datetime(1970, 1, 1, 0, 0, 1, tzinfo=UTC)


class RedisStore:
    """Stores session values in a cache and the session id in a cookie.

    Build instances with :meth:`create`, which verifies the cache is
    reachable. Configuration is meant to be set once at startup; the
    setters are not synchronized with in-flight requests.
    """

    def __init__(
        self,
        gateway: CacheGateway,
        codecs: list[CookieCodec],
        *,
        options: SessionOptions | None = None,
        default_max_age: int = DEFAULT_MAX_AGE,
        max_length: int = DEFAULT_MAX_LENGTH,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        serializer: Serializer | None = None,
        timeout: float | None = None,
    ) -> None:
        self._gateway = gateway
        self.codecs = codecs
        self.options = options if options is not None else SessionOptions()
        self.default_max_age = default_max_age
        self._max_length = max_length
        self._key_prefix = key_prefix
        self._serializer: Serializer = serializer if serializer is not None else PickleSerializer()
        self._timeout = timeout

    @classmethod
    async def create(
        cls,
        client: Any,
        *key_pairs: bytes,
        ping_timeout: float = DEFAULT_PING_TIMEOUT,
    ) -> RedisStore:
        """Create a store and check that the cache answers.

        Args:
            client: A :class:`CacheGateway` or a ``redis.asyncio.Redis`` client.
            key_pairs: Alternating hash and block keys; the first pair signs
                new cookies, all pairs are tried in order when decoding.
            ping_timeout: Deadline in seconds for the liveness check.

        Raises:
            ConstructionError: The cache did not answer the ping.
        """
        gateway: CacheGateway = RedisCacheGateway(client) if isinstance(client, Redis) else client
        store = cls(gateway, list(codecs_from_pairs(*key_pairs)))
        try:
            await gateway.ping(timeout=ping_timeout)
        except CacheError as exc:
            raise ConstructionError(f"Session cache is unreachable: {exc}") from exc
        logger.debug("session_store_created", key_prefix=store.key_prefix, codecs=len(store.codecs))
        return store

    @property
    def gateway(self) -> CacheGateway:
        return self._gateway

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    @property
    def max_length(self) -> int:
        return self._max_length

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    @property
    def timeout(self) -> float | None:
        return self._timeout

    def set_max_length(self, length: int) -> None:
        """Limit serialized payloads to *length* bytes; 0 disables the limit."""
        if length >= 0:
            self._max_length = length

    def set_key_prefix(self, prefix: str) -> None:
        self._key_prefix = prefix

    def set_serializer(self, serializer: Serializer) -> None:
        self._serializer = serializer

    def set_timeout(self, timeout: float | None) -> None:
        """Set the deadline applied to every cache operation."""
        self._timeout = timeout

    def set_max_age(self, max_age: int) -> None:
        """Set the default cookie max age and the codecs' timestamp limit."""
        self.options.max_age = max_age
        for codec in self.codecs:
            if isinstance(codec, SecureCookie):
                codec.max_age(max_age)
            else:
                logger.warning("codec_max_age_unsupported", codec=type(codec).__name__)

    async def close(self) -> None:
        await self._gateway.close()

    async def get(self, request: Any, name: str) -> Session:
        """Return the session *name* for this request, loading it only once."""
        return await get_registry(request).get(self, name)

    async def new(self, request: Any, name: str) -> Session:
        """Load the session *name* from the request cookie, or start a new one.

        A missing, forged, or expired cookie and a cache miss all produce a new
        session. A rejected cookie is kept on ``session.load_error``.

        Raises:
            CacheError: The cache could not be read.
            SerializationError: The cached payload could not be decoded.
        """
        session = Session(self, name, options=self.options.copy())
        cookies = getattr(request, "cookies", None) or {}
        token = cookies.get(name)
        if token is None:
            return session

        try:
            session.id = decode_multi(name, token, self.codecs)
        except CookieDecodeError as exc:
            logger.debug("session_cookie_rejected", name=name, reason=str(exc))
            session.load_error = exc
            return session

        session.is_new = not await self._load(session)
        return session

    async def save(self, request: Any, response: Any, session: Session) -> None:
        """Persist *session* and set its cookie on *response*.

        A non-positive max age deletes the cache entry and expires the cookie.

        Raises:
            SerializationError: The values could not be serialized.
            PayloadTooLargeError: The payload exceeds :attr:`max_length`.
            CacheError: The cache write or delete failed; no cookie is set.
            CookieEncodeError: The cookie token could not be produced; nothing
                is written.
        """
        max_age = self._effective_max_age(session)
        if max_age <= 0:
            await self._delete(session)
            self._set_cookie(response, session, "", max_age)
            return

        if not session.id:
            session.id = new_session_id()
        token = encode_multi(session.name, session.id, self.codecs)
        await self._save(session)
        self._set_cookie(response, session, token, session.options.max_age)

    def _key(self, session: Session) -> str:
        return f"{self._key_prefix}{session.id}"

    def _effective_max_age(self, session: Session) -> int:
        if session.options.max_age is None:
            return self.default_max_age
        return session.options.max_age

    async def _save(self, session: Session) -> None:
        payload = self._serializer.serialize(session)
        if self._max_length and len(payload) > self._max_length:
            raise PayloadTooLargeError(len(payload), self._max_length)
        ttl = self._effective_max_age(session)
        await self._gateway.set(self._key(session), payload, ttl, timeout=self._timeout)
        logger.debug("session_saved", name=session.name, session_id=session.id, ttl=ttl, size=len(payload))

    async def _load(self, session: Session) -> bool:
        payload = await self._gateway.get(self._key(session), timeout=self._timeout)
        if payload is None:
            return False
        self._serializer.deserialize(payload, session)
        return True

    async def _delete(self, session: Session) -> None:
        if session.id:
            await self._gateway.delete(self._key(session), timeout=self._timeout)
            logger.debug("session_deleted", name=session.name, session_id=session.id)

    @staticmethod
    def _set_cookie(response: Any, session: Session, value: str, max_age: int | None) -> None:
        options = session.options
        expires: datetime | int | None = None
        if max_age is not None:
            if max_age > 0:
                expires = max_age
            else:
                if max_age < 0:
                    expires = _EPOCH
                max_age = 0
        response.set_cookie(
            key=session.name,
            value=value,
            max_age=max_age,
            expires=expires,
            path=options.path,
            domain=options.domain,
            secure=options.secure,
            httponly=options.http_only,
            samesite=options.same_site,
        )
