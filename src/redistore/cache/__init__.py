"""redistore cache — key-value gateway used to persist session payloads.

Import concrete gateways from the adapter package::

    from redistore.cache.adapters.memory import InMemoryCacheGateway
    from redistore.cache.adapters.redis import RedisCacheGateway
"""

from redistore.cache.ports.outbound import CacheGateway

__all__ = ["CacheGateway"]
