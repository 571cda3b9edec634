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
"""redistore session — cookie-identified sessions persisted in a key-value cache.

Typical use with Starlette::

    store = await RedisStore.create(redis.asyncio.from_url(url), b"hash-key")

    async def handler(request):
        session = await store.get(request, "sess")
        session.values["user"] = "alice"
        response = PlainTextResponse("ok")
        await session.save(request, response)
        return response
"""

from redistore.session.middleware import SessionMiddleware
from redistore.session.ports.outbound import Serializer, SessionStore
from redistore.session.registry import SessionRegistry, get_registry, save_all
from redistore.session.serializers import JsonSerializer, PickleSerializer, get_serializer
from redistore.session.session import Session, SessionOptions
from redistore.session.store import RedisStore

__all__ = [
    "JsonSerializer",
    "PickleSerializer",
    "RedisStore",
    "Serializer",
    "Session",
    "SessionMiddleware",
    "SessionOptions",
    "SessionRegistry",
    "SessionStore",
    "get_registry",
    "get_serializer",
    "save_all",
]
