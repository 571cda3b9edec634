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
"""SessionRegistry — per-request cache of loaded sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from redistore.session.ports.outbound import SessionStore
    from redistore.session.session import Session

_STATE_ATTR = "redistore_sessions"


class SessionRegistry:
    """Keeps the sessions loaded during one request, keyed by cookie name.

    Repeated ``get`` calls for the same name return the same ``Session``
    object, so every handler in the request sees the same values.
    """

    def __init__(self, request: Any) -> None:
        self._request = request
        self._sessions: dict[str, Session] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    async def get(self, store: SessionStore, name: str) -> Session:
        """Return the cached session *name*, loading it from *store* on first use."""
        session = self._sessions.get(name)
        if session is None:
            session = await store.new(self._request, name)
            self._sessions[name] = session
        return session

    async def save(self, response: Any) -> None:
        """Save every loaded session in load order; the first failure propagates."""
        for session in self._sessions.values():
            await session.store.save(self._request, response, session)


def get_registry(request: Any) -> SessionRegistry:
    """Return the registry attached to *request*, creating it on first access."""
    registry = getattr(request.state, _STATE_ATTR, None)
    if registry is None:
        registry = SessionRegistry(request)
        setattr(request.state, _STATE_ATTR, registry)
    return registry


async def save_all(request: Any, response: Any) -> None:
    """Save all sessions loaded for *request* and set their cookies on *response*."""
    await get_registry(request).save(response)
