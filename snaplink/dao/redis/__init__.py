from snaplink.dao.redis.redis_key_schema import RedisKeySchema
from snaplink.dao.redis.mixins import RedisClientMixin
from snaplink.dao.redis.link_redis_dao import LinkRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'LinkRedisDAO',
]
