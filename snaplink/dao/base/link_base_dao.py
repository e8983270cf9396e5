"""Abstract base class for link data access objects (DAOs).

This class establishes a consistent contract for all link store implementations,
regardless of the underlying storage mechanism (an in-process map persisted to a
JSON snapshot, or Redis).

Responsibilities:
    - Provide an interface for writing, reading, deleting and listing LinkRecordModel objects.
    - Own the monotonic counter used to allocate short codes.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from snaplink.models import LinkRecordModel
        >>> from snaplink.dao import LinkJsonDAO, PutMode

        >>> dao = LinkJsonDAO('store.json')

        >>> record = LinkRecordModel(
        ...     target="https://example.com/blog/article-123",
        ...     created_at=1760486400,
        ...     ttl_seconds=604800,
        ... )
        >>> dao.put("promo", record, mode=PutMode.CREATE_ONLY)

        >>> dao.get("promo").target
        'https://example.com/blog/article-123'

        >>> dao.allocate_id()
        1
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from enum import StrEnum

from snaplink.models import LinkRecordModel
from snaplink.dao.exceptions import DataStoreError, LinkNotFoundError


logger = logging.getLogger(__name__)


class PutMode(StrEnum):
    """Write semantics for LinkBaseDAO.put()."""

    CREATE_ONLY = 'create_only'  # fail if the code already exists
    UPSERT = 'upsert'  # always write


class LinkBaseDAO(ABC):
    """Interface for link data access objects (DAOs).

    Methods:
        put(code: str, record: LinkRecordModel, mode: PutMode) -> LinkBaseDAO:
            Store a record under a code.
            Raises LinkAlreadyExistsError if mode is CREATE_ONLY and the code exists.
            Raises DataStoreError on connection or write failure.

        get(code: str) -> LinkRecordModel:
            Retrieve a record by code.
            Raises LinkNotFoundError if the code does not exist.
            Raises DataStoreError on connection or read failure.

        delete(code: str) -> None:
            Remove a record by code.
            Raises LinkNotFoundError if the code does not exist.
            Raises DataStoreError on connection or write failure.

        hit(code: str) -> LinkRecordModel:
            Atomically add one click to an existing record and return the result.
            Raises LinkNotFoundError if the code does not exist (never recreates it).

        delete_many(codes: Iterable[str]) -> int:
            Delete several codes, skipping the ones that are gone or fail.
            Stores with a cheaper batched delete override it.

        list() -> Iterator[tuple[str, LinkRecordModel]]:
            Lazily iterate over all (code, record) pairs, in no particular order.
            Entries which can't be read are skipped.

        allocate_id() -> int:
            Atomically increment the counter and return the new value.

        count() -> int:
            Return the current counter value without incrementing it.

    Subclassing:
        Datastore-specific implementations (e.g., LinkJsonDAO or LinkRedisDAO)
        must extend this class and implement all abstract methods.
    """

    @abstractmethod
    def put(self, code: str, record: LinkRecordModel, mode: PutMode = PutMode.UPSERT) -> 'LinkBaseDAO':
        """Store a record under a code.

        Args:
            code (str):
                Short code used as the key.
            record (LinkRecordModel):
                Record to store.
            mode (PutMode):
                CREATE_ONLY fails on an existing code; UPSERT overwrites.

        Returns:
            LinkBaseDAO: self (for method chaining)

        Raises:
            LinkAlreadyExistsError:
                If mode is CREATE_ONLY and a record with the same code exists.
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, code: str) -> LinkRecordModel:
        """Retrieve a record by code.

        Raises:
            LinkNotFoundError:
                If no record with the given code exists.
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def delete(self, code: str) -> None:
        """Delete a record by code.

        Raises:
            LinkNotFoundError:
                If no record with the given code exists.
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def hit(self, code: str) -> LinkRecordModel:
        """Add one click to an existing record.

        The read and the write form one atomic step: concurrent hits are all
        counted, and a record deleted concurrently stays deleted.

        Returns:
            LinkRecordModel: the record with its incremented click count.

        Raises:
            LinkNotFoundError:
                If no record with the given code exists.
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    def delete_many(self, codes: Iterable[str]) -> int:
        """Delete every listed code, one at a time.

        Codes that are already gone are skipped silently; codes whose deletion
        fails are logged and skipped.

        Returns:
            int: number of records actually deleted.
        """
        deleted = 0
        for code in codes:
            try:
                self.delete(code)
            except LinkNotFoundError:
                logger.debug('Link already gone.', extra={'shortcode': code})
            except DataStoreError:
                logger.warning('Failed to delete link.', extra={'shortcode': code}, exc_info=True)
            else:
                deleted += 1
        return deleted

    @abstractmethod
    def list(self) -> Iterator[tuple[str, LinkRecordModel]]:
        """Iterate over all stored (code, record) pairs.

        The iterator is lazy, finite and unordered. Every call starts a fresh
        pass over the store.

        Raises:
            DataStoreError:
                If the store can't be enumerated at all.
        """
        pass

    @abstractmethod
    def allocate_id(self) -> int:
        """Increment the counter by 1 and return the new value.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Return the current counter value without incrementing it.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
