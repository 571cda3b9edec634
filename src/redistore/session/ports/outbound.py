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
"""Session persistence protocols."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from redistore.session.session import Session


@runtime_checkable
class Serializer(Protocol):
    """Converts session values to and from the cached byte payload.

    ``deserialize`` merges into ``session.values`` without clearing it.
    Both methods raise ``SerializationError``.
    """

    def serialize(self, session: Session) -> bytes: ...

    def deserialize(self, data: bytes, session: Session) -> None: ...


@runtime_checkable
class SessionStore(Protocol):
    """Loads and saves sessions for an HTTP request/response pair."""

    async def get(self, request: Any, name: str) -> Session: ...

    async def new(self, request: Any, name: str) -> Session: ...

    async def save(self, request: Any, response: Any, session: Session) -> None: ...
