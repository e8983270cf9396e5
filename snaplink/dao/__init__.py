from snaplink.dao.base import LinkBaseDAO, PutMode
from snaplink.dao.json import LinkJsonDAO
from snaplink.dao.redis import LinkRedisDAO


__all__ = [
    'LinkBaseDAO',
    'PutMode',
    'LinkJsonDAO',
    'LinkRedisDAO',
]
