"""Redis client construction for the session cache.

The client is built by the process entry point and handed to the session
store; ``redis.Redis`` connects lazily, so construction never blocks.
"""

import redis
from starlette.requests import Request


def create_cache(redis_url: str) -> redis.Redis:
    """Create a Redis client that returns ``str`` values."""
    return redis.Redis.from_url(redis_url, decode_responses=True)


def get_cache(request: Request) -> redis.Redis:
    """Dependency returning the application's cache client."""
    return request.app.state.cache
