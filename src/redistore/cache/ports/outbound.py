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
"""Cache gateway protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CacheGateway(Protocol):
    """Byte-oriented key-value operations the session store relies on.

    Every operation takes an optional ``timeout`` in seconds; ``None`` means
    the caller imposes no deadline. Failures raise ``CacheError``.
    ``get`` returns ``None`` for a missing key and for a zero-length value.
    """

    async def get(self, key: str, *, timeout: float | None = None) -> bytes | None: ...

    async def set(self, key: str, payload: bytes, ttl: int, *, timeout: float | None = None) -> None: ...

    async def delete(self, key: str, *, timeout: float | None = None) -> None: ...

    async def ping(self, *, timeout: float | None = None) -> None: ...

    async def close(self) -> None: ...
