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
"""Redis-backed cache gateway."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from redistore.kernel.exceptions import CacheError, CacheTimeoutError

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class RedisCacheGateway:
    """Cache gateway that delegates to a ``redis.asyncio.Redis``-like client.

    Payloads are stored as raw bytes; serialization is the caller's concern.
    Deadlines are enforced with ``asyncio.timeout`` and no operation is retried.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @property
    def client(self) -> Any:
        return self._client

    async def get(self, key: str, *, timeout: float | None = None) -> bytes | None:
        """Fetch the payload stored under *key*, or ``None`` if absent or empty."""
        raw = await self._call("get", key, self._client.get(key), timeout)
        if not raw:
            return None
        if isinstance(raw, str):
            return raw.encode()
        return bytes(raw)

    async def set(self, key: str, payload: bytes, ttl: int, *, timeout: float | None = None) -> None:
        """Store *payload* under *key* expiring after *ttl* seconds."""
        await self._call("set", key, self._client.set(key, payload, ex=ttl), timeout)

    async def delete(self, key: str, *, timeout: float | None = None) -> None:
        """Remove *key*; deleting a missing key is not an error."""
        await self._call("delete", key, self._client.delete(key), timeout)

    async def ping(self, *, timeout: float | None = None) -> None:
        """Check that the server answers."""
        await self._call("ping", None, self._client.ping(), timeout)

    async def close(self) -> None:
        """Close the underlying Redis connection pool."""
        await self._client.aclose()

    async def _call(self, operation: str, key: str | None, awaitable: Awaitable[T], timeout: float | None) -> T:
        try:
            async with asyncio.timeout(timeout):
                return await awaitable
        except (TimeoutError, RedisTimeoutError) as exc:
            _logger.warning("Redis %s timed out after %ss", operation, timeout)
            raise CacheTimeoutError(f"Redis {operation} timed out", operation, key) from exc
        except RedisError as exc:
            raise CacheError(f"Redis {operation} failed: {exc}", operation, key) from exc
