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
"""In-memory cache gateway with TTL-based expiry."""

from __future__ import annotations

import time


class InMemoryCacheGateway:
    """In-memory cache gateway with TTL support.

    Suitable for development, testing, and single-process applications.
    """

    def __init__(self) -> None:
        self._store: dict[str, tuple[bytes, float, int]] = {}

    async def get(self, key: str, *, timeout: float | None = None) -> bytes | None:
        """Get a payload by key. Returns None if missing, empty, or expired."""
        entry = self._live_entry(key)
        if entry is None or not entry[0]:
            return None
        return entry[0]

    async def set(self, key: str, payload: bytes, ttl: int, *, timeout: float | None = None) -> None:
        """Store a payload expiring after *ttl* seconds."""
        self._store[key] = (bytes(payload), time.monotonic() + ttl, ttl)

    async def delete(self, key: str, *, timeout: float | None = None) -> None:
        """Remove a key if it exists."""
        self._store.pop(key, None)

    async def ping(self, *, timeout: float | None = None) -> None:
        return None

    async def close(self) -> None:
        self._store.clear()

    def ttl(self, key: str) -> int | None:
        """Return the TTL in seconds the live entry was written with, or None."""
        entry = self._live_entry(key)
        return entry[2] if entry is not None else None

    def __contains__(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def _live_entry(self, key: str) -> tuple[bytes, float, int] | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if time.monotonic() > entry[1]:
            del self._store[key]
            return None
        return entry
