"""Shared Redis connection handling for Redis-backed DAOs

RedisClientMixin owns the client and the key schema, and refuses to build a DAO
whose Redis endpoint doesn't answer PING.

Example:
    >>> class LinkRedisDAO(RedisClientMixin, LinkBaseDAO):
    ...     pass
    ...
    >>> dao = LinkRedisDAO(redis_host='redis', prefix='snaplink:prod')
    >>> dao.keys.link_key('abc')
    'snaplink:prod:links:abc'
"""

import redis

from snaplink.dao.redis.redis_key_schema import RedisKeySchema
from snaplink.dao.redis.helpers import CONNECTIVITY_ERRORS, connection_error


class RedisClientMixin:
    """Attach a checked Redis client and a key schema to a DAO.

    Attributes:
        redis (redis.Redis): client shared by every DAO method.
        keys (RedisKeySchema): namespaced key builder.

    Connection settings mirror the `redis` backend section of the app config
    (host, port, db, decode_responses, username, password). Port and db may
    arrive as strings from the config document and are coerced to int.
    """

    def __init__(
        self,
        redis_host: str = 'localhost',
        redis_port: int | str = 6379,
        redis_db: int | str = 0,
        redis_decode_responses: bool = True,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ):
        if redis_client is None:
            redis_client = self._build_client(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)
        self._healthcheck()

    @staticmethod
    def _build_client(**options) -> redis.Redis:
        return redis.Redis(**options)

    def _healthcheck(self) -> None:
        """PING Redis.

        Raises:
            DataStoreError: if Redis can't be reached.
        """
        try:
            self.redis.ping()
        except CONNECTIVITY_ERRORS as e:
            raise connection_error(self.redis) from e
