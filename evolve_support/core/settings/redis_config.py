"""Redis connection configuration."""

from pydantic import BaseModel


class RedisConfig(BaseModel, frozen=True):
    """Token blacklist, one-time code and attempt-counter store."""

    url: str
    socket_timeout: float = 5.0
