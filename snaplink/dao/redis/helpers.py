import functools
from typing import Any
from collections.abc import Callable

import redis

from snaplink.dao.exceptions import DataStoreError


__all__ = []

CONNECTIVITY_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


def connection_error(client: redis.Redis) -> DataStoreError:
    """Build a DataStoreError naming the Redis endpoint the client talks to"""
    info = client.connection_pool.connection_kwargs
    redis_host = info.get('host')
    redis_port = info.get('port')
    redis_db = info.get('db')
    return DataStoreError(f"Can't connect to Redis at {redis_host}:{redis_port}/{redis_db}.")


def store_error(client: redis.Redis, error: redis.exceptions.RedisError) -> DataStoreError:
    """Translate any redis-py failure into a DataStoreError

    Connectivity failures name the endpoint; command failures (OOM, READONLY,
    WRONGTYPE, ...) carry the server's reply.
    """
    if isinstance(error, CONNECTIVITY_ERRORS):
        return connection_error(client)
    return DataStoreError(f'Redis command failed: {error}')


def handle_redis_connection_error[F: Callable[..., Any]](method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle backend errors

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations which may raise any
            redis.exceptions.RedisError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError instead.

    Example:
        >>> @handle_redis_connection_error
        ... def count(self):
        ...     return self.redis.get('count')
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except redis.exceptions.RedisError as e:
            raise store_error(self.redis, e) from e

    return wrapper
