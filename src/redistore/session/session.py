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
"""Session and SessionOptions — per-request session state."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from redistore.kernel.exceptions import CookieDecodeError
    from redistore.session.store import RedisStore

FLASHES_KEY = "_flash"


@dataclass
class SessionOptions:
    """Cookie attributes, and the lifetime of the backing cache entry.

    ``max_age`` is in seconds. ``None`` means it was not set explicitly:
    the store's default max age is used for the cache entry and the cookie
    lasts for the browser session. Zero or negative deletes the session on save.
    """

    path: str = "/"
    domain: str | None = None
    max_age: int | None = 86400 * 30
    secure: bool = False
    http_only: bool = True
    same_site: str | None = "lax"

    def copy(self) -> SessionOptions:
        return dataclasses.replace(self)


class Session:
    """Server-side session bound to a named cookie.

    Attributes:
        id: The session identifier; empty until the session is first saved.
        values: Session data. Keys must be strings for the JSON serializer.
        is_new: ``True`` unless the session was loaded from the cache.
        options: Per-session copy of the store's cookie options.
        load_error: The cookie error recovered while loading, if any.
    """

    def __init__(
        self,
        store: RedisStore,
        name: str,
        *,
        options: SessionOptions | None = None,
    ) -> None:
        self._store = store
        self._name = name
        self.id = ""
        self.values: dict[Any, Any] = {}
        self.is_new = True
        self.options = options if options is not None else SessionOptions()
        self.load_error: CookieDecodeError | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def store(self) -> RedisStore:
        return self._store

    def add_flash(self, value: Any, key: str = FLASHES_KEY) -> None:
        """Append a flash message, consumed by the next call to :meth:`flashes`."""
        self.values.setdefault(key, []).append(value)

    def flashes(self, key: str = FLASHES_KEY) -> list[Any]:
        """Return and remove all flash messages stored under *key*."""
        return list(self.values.pop(key, None) or [])

    async def save(self, request: Any, response: Any) -> None:
        """Persist the session through its store and set the cookie."""
        await self._store.save(request, response, self)

    def __repr__(self) -> str:
        return f"Session(name={self._name!r}, is_new={self.is_new}, keys={list(self.values)!r})"
