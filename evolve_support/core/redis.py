"""Shared Redis connection backing tokens, one-time codes and sign-in attempts."""

import redis.asyncio as redis
import structlog

from evolve_support.core.config import settings

logger = structlog.get_logger()

redis_client: redis.Redis | None = None  # type: ignore[type-arg]


async def init_redis() -> redis.Redis:  # type: ignore[type-arg]
    """Connect and ping; startup fails fast when Redis is unreachable."""
    global redis_client  # noqa: PLW0603
    client = redis.from_url(
        settings.redis.url,
        decode_responses=True,
        socket_timeout=settings.redis.socket_timeout,
    )
    await client.ping()
    redis_client = client
    logger.info("Redis connected", socket_timeout=settings.redis.socket_timeout)
    return client


async def close_redis() -> None:
    global redis_client  # noqa: PLW0603
    if redis_client is not None:
        client, redis_client = redis_client, None
        await client.aclose()


def get_redis() -> redis.Redis:  # type: ignore[type-arg]
    """Active client for request handlers; the lifespan must have connected it."""
    if redis_client is None:
        raise RuntimeError("Redis is not connected; init_redis() runs at startup")
    return redis_client
