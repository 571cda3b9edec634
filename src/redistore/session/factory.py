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
"""Builds a RedisStore from configuration."""

from __future__ import annotations

import redis.asyncio as aioredis

from redistore.cache.adapters.redis import RedisCacheGateway
from redistore.config.properties.logging import LoggingProperties
from redistore.config.properties.session import SessionProperties
from redistore.core.config import Config
from redistore.kernel.exceptions import ConstructionError
from redistore.logging.structlog_adapter import StructlogAdapter
from redistore.session.serializers import get_serializer
from redistore.session.session import SessionOptions
from redistore.session.store import RedisStore


async def create_store(config: Config) -> RedisStore:
    """Create a store from the ``redistore.session`` configuration section.

    When ``redistore.logging.enabled`` is true, logging is configured first.

    Raises:
        ValueError: No key pairs are configured or the serializer is unknown.
        ConstructionError: Redis did not answer the liveness check.
    """
    logging_props = config.bind(LoggingProperties)
    if logging_props.enabled:
        StructlogAdapter(logging_props).configure()

    props = config.bind(SessionProperties)
    if not props.key_pairs:
        raise ValueError("redistore.session.key-pairs must list at least one hash key")
    serializer = get_serializer(props.serializer)

    client = aioredis.from_url(props.redis_url)  # type: ignore[no-untyped-call,unused-ignore]
    key_pairs = [str(key).encode("utf-8") for key in props.key_pairs]
    try:
        store = await RedisStore.create(RedisCacheGateway(client), *key_pairs, ping_timeout=props.ping_timeout)
    except ConstructionError:
        await client.aclose()
        raise

    store.options = SessionOptions(
        path=props.path,
        domain=props.domain,
        max_age=props.max_age,
        secure=props.secure,
        http_only=props.http_only,
        same_site=props.same_site,
    )
    if props.max_age is not None:
        store.set_max_age(props.max_age)
    store.default_max_age = props.default_max_age
    store.set_key_prefix(props.key_prefix)
    store.set_max_length(props.max_length)
    store.set_serializer(serializer)
    store.set_timeout(props.timeout)
    return store
