"""Data Access Object (DAO) implementation for managing link records in Redis

This module provides a Redis-based implementation of LinkBaseDAO. Each record is
stored as a JSON string under its own key and the code counter lives under a
dedicated key. Redis provides per-key durability, so no snapshot file is used.

Responsibilities:
    - Store, retrieve, delete and enumerate link records;
    - Increment the global code counter;
    - Use Redis' conditional write (SET NX) for create-only puts;
    - Raise appropriate DAO exceptions on missing keys and connectivity issues.

Classes:
    LinkRedisDAO:
        DAO for storing and retrieving LinkRecordModel in a Redis datastore.

Example:
    >>> from snaplink.models import LinkRecordModel
    >>> from snaplink.dao.redis import LinkRedisDAO

    >>> dao = LinkRedisDAO(prefix="snaplink:dev")

    >>> record = LinkRecordModel(target="https://example.com/page", created_at=1760486400, ttl_seconds=604800)
    >>> dao.put("abc123", record, mode=PutMode.CREATE_ONLY)
    <LinkRedisDAO>

    >>> dao.get("abc123").target
    'https://example.com/page'
"""

import json
import logging
from collections.abc import Iterator

import redis
from beartype import beartype

from snaplink.models import LinkRecordModel
from snaplink.dao.base import LinkBaseDAO, PutMode
from snaplink.dao.redis.mixins import RedisClientMixin
from snaplink.dao.redis.helpers import handle_redis_connection_error, store_error
from snaplink.dao.exceptions import DataStoreError, LinkAlreadyExistsError, LinkNotFoundError


logger = logging.getLogger(__name__)


class LinkRedisDAO(RedisClientMixin, LinkBaseDAO):
    """Redis-based Data Access Object (DAO) for managing link records

    This class implements the LinkBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        put(code, record, mode) -> LinkRedisDAO:
            SET (UPSERT) or SET NX (CREATE_ONLY) the serialized record.
        get(code) -> LinkRecordModel:
            GET and deserialize a record.
        delete(code) -> None:
            DEL a record.
        hit(code) -> LinkRecordModel:
            WATCH the key, then SET XX the record with one more click inside MULTI.
        list() -> Iterator[tuple[str, LinkRecordModel]]:
            SCAN link keys and GET each of them.
        allocate_id() -> int:
            INCR the counter key.
        count() -> int:
            GET the counter key.

    NOTE:
        Record keys carry no Redis TTL. Expiry is evaluated by the service on
        read and by the periodic sweep, so an expired record answers "gone"
        rather than "not found" until it is swept.
    """

    SCAN_BATCH_SIZE = 500
    HIT_ATTEMPTS = 10

    @handle_redis_connection_error
    @beartype
    def put(self, code: str, record: LinkRecordModel, mode: PutMode = PutMode.UPSERT) -> 'LinkRedisDAO':
        """Store a record in Redis

        CREATE_ONLY relies on SET NX, so the existence check and the write are
        a single atomic command.

        Raises:
            LinkAlreadyExistsError:
                If mode is CREATE_ONLY and a record with the same code exists.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        link_key = self.keys.link_key(code)
        payload = json.dumps(record.to_dict())

        if mode == PutMode.CREATE_ONLY:
            if not self.redis.set(link_key, payload, nx=True):
                raise LinkAlreadyExistsError(f"Link with code '{code}' already exists.")
        else:
            self.redis.set(link_key, payload)
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, code: str) -> LinkRecordModel:
        """Retrieve a stored record by code

        Raises:
            LinkNotFoundError:
                If the code does not exist in Redis.
            DataStoreError:
                If the stored value is corrupt or Redis connectivity issues occur.
        """
        raw = self.redis.get(self.keys.link_key(code))
        if raw is None:
            raise LinkNotFoundError(f"Link with code '{code}' not found.")
        return self._deserialize(code, raw)

    @handle_redis_connection_error
    @beartype
    def delete(self, code: str) -> None:
        if not self.redis.delete(self.keys.link_key(code)):
            raise LinkNotFoundError(f"Link with code '{code}' not found.")

    @handle_redis_connection_error
    @beartype
    def hit(self, code: str) -> LinkRecordModel:
        """Add one click to a stored record

        Optimistic transaction: WATCH the key, read it, then write it back with
        SET XX inside MULTI/EXEC. A concurrent write or delete aborts EXEC and
        the read is retried, so no click is lost and a deleted code is never
        recreated.

        Raises:
            LinkNotFoundError:
                If the code does not exist (or is deleted while retrying).
            DataStoreError:
                If the record is corrupt, Redis fails, or the key stays contended
                for HIT_ATTEMPTS rounds.
        """
        link_key = self.keys.link_key(code)

        with self.redis.pipeline() as pipe:
            for _ in range(self.HIT_ATTEMPTS):
                try:
                    pipe.watch(link_key)
                    raw = pipe.get(link_key)
                    if raw is None:
                        raise LinkNotFoundError(f"Link with code '{code}' not found.")
                    record = self._deserialize(code, raw).with_click()

                    pipe.multi()
                    pipe.set(link_key, json.dumps(record.to_dict()), xx=True)
                    pipe.execute()
                    return record
                except redis.exceptions.WatchError:
                    logger.debug('Link changed during click update. Retrying.', extra={'shortcode': code})
                    continue

        raise DataStoreError(f"Link with code '{code}' is too contended to update.")

    def list(self) -> Iterator[tuple[str, LinkRecordModel]]:
        """Iterate over all link records via SCAN

        SCAN doesn't take a consistent snapshot: keys added or removed during
        the iteration may or may not be returned. Keys which vanish between
        SCAN and GET, values which can't be decoded and keys whose GET fails
        (wrong type, timeout, ...) are logged and skipped.

        Raises:
            DataStoreError:
                If the SCAN itself fails.
        """
        try:
            for key in self.redis.scan_iter(match=self.keys.link_pattern(), count=self.SCAN_BATCH_SIZE):
                if isinstance(key, bytes):
                    key = key.decode('utf-8')

                try:
                    code = self.keys.code_from_key(key)
                    raw = self.redis.get(key)
                    if raw is None:
                        continue
                    record = self._deserialize(code, raw)
                except (ValueError, DataStoreError, redis.exceptions.RedisError):
                    logger.warning('Skipping unreadable link record.', extra={'key': key}, exc_info=True)
                    continue

                yield code, record
        except redis.exceptions.RedisError as e:
            raise store_error(self.redis, e) from e

    @handle_redis_connection_error
    def allocate_id(self) -> int:
        return int(self.redis.incr(self.keys.counter_key()))

    @handle_redis_connection_error
    def count(self) -> int:
        value = self.redis.get(self.keys.counter_key())
        return 0 if value is None else int(value)

    def _deserialize(self, code: str, raw: str | bytes) -> LinkRecordModel:
        try:
            return LinkRecordModel.from_dict(json.loads(raw))
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
            raise DataStoreError(f"Link record for code '{code}' is corrupt.") from e

    def __repr__(self) -> str:
        return f'<LinkRedisDAO prefix={self.keys.prefix!r}>'
