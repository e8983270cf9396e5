"""Data Access Object (DAO) implementation keeping links in process memory

The in-process store holds the counter and the code -> record map in memory,
guarded by one re-entrant lock, and persists the full state to a JSON snapshot
after every mutation.

Responsibilities:
    - Serve put/get/delete/list from memory;
    - Serialize every mutation of the counter and map through one lock;
    - Make each mutation durable via an atomic snapshot replace;
    - Reload the previous state on startup (a missing file is an empty store).

Classes:
    LinkJsonDAO:
        DAO storing LinkRecordModel instances in memory with a JSON snapshot.

Example:
    >>> dao = LinkJsonDAO('/var/lib/snaplink/store.json')
    >>> code_id = dao.allocate_id()
    >>> dao.put('1', record)
    <LinkJsonDAO>
    >>> dao.get('1') == record
    True
"""

import os
import logging
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path

from beartype import beartype

from snaplink.models import LinkRecordModel
from snaplink.dao.base import LinkBaseDAO, PutMode
from snaplink.dao.exceptions import LinkAlreadyExistsError, LinkNotFoundError
from snaplink.dao.json.snapshot import read_snapshot, write_snapshot


logger = logging.getLogger(__name__)


class LinkJsonDAO(LinkBaseDAO):
    """In-process Data Access Object (DAO) persisted to a JSON snapshot

    Attributes:
        path (Path):
            Location of the snapshot file.

    Methods:
        load() -> LinkJsonDAO:
            Replace the in-memory state with the snapshot on disk.

        delete_many(codes: Iterable[str]) -> int:
            Delete several codes with a single snapshot write (overrides the per-code loop).

        (see LinkBaseDAO for put/get/delete/hit/list/allocate_id/count)

    NOTE:
        allocate_id() doesn't write a snapshot by itself. The counter is
        persisted with the next put() or delete(), and a record using the
        allocated code can only be persisted together with it.
    """

    def __init__(self, path: str | os.PathLike = 'store.json', autoload: bool = True):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._counter = 0
        self._records: dict[str, LinkRecordModel] = {}

        if autoload:
            self.load()

    def load(self) -> 'LinkJsonDAO':
        """Replace in-memory state with the snapshot file

        Raises:
            SnapshotError: If the snapshot exists but is unreadable or malformed.
        """
        with self._lock:
            snapshot = read_snapshot(self.path)
            if snapshot is None:
                logger.info('No existing store file. Starting fresh.', extra={'path': str(self.path)})
                self._counter, self._records = 0, {}
            else:
                self._counter, self._records = snapshot
                logger.info(
                    'Loaded store from snapshot.',
                    extra={'path': str(self.path), 'records': len(self._records), 'counter': self._counter},
                )
        return self

    def _persist(self) -> None:
        # Caller must hold self._lock
        write_snapshot(self.path, self._counter, self._records)

    @beartype
    def put(self, code: str, record: LinkRecordModel, mode: PutMode = PutMode.UPSERT) -> 'LinkJsonDAO':
        """Store a record and write a snapshot

        The existence check for CREATE_ONLY and the insertion happen inside the
        same critical section.

        Raises:
            LinkAlreadyExistsError:
                If mode is CREATE_ONLY and the code already exists.
            SnapshotError:
                If the snapshot can't be written. The in-memory change is rolled back.
        """
        with self._lock:
            previous = self._records.get(code)
            if mode == PutMode.CREATE_ONLY and previous is not None:
                raise LinkAlreadyExistsError(f"Link with code '{code}' already exists.")

            self._records[code] = record
            try:
                self._persist()
            except Exception:
                if previous is None:
                    del self._records[code]
                else:
                    self._records[code] = previous
                raise
        return self

    @beartype
    def get(self, code: str) -> LinkRecordModel:
        with self._lock:
            try:
                return self._records[code]
            except KeyError:
                raise LinkNotFoundError(f"Link with code '{code}' not found.") from None

    @beartype
    def delete(self, code: str) -> None:
        with self._lock:
            if code not in self._records:
                raise LinkNotFoundError(f"Link with code '{code}' not found.")

            record = self._records.pop(code)
            try:
                self._persist()
            except Exception:
                self._records[code] = record
                raise

    @beartype
    def hit(self, code: str) -> LinkRecordModel:
        """Add one click under the store lock and write a snapshot

        Raises:
            LinkNotFoundError:
                If the code doesn't exist (a deleted code is never written back).
            SnapshotError:
                If the snapshot can't be written. The click is rolled back.
        """
        with self._lock:
            previous = self._records.get(code)
            if previous is None:
                raise LinkNotFoundError(f"Link with code '{code}' not found.")

            record = previous.with_click()
            self._records[code] = record
            try:
                self._persist()
            except Exception:
                self._records[code] = previous
                raise
            return record

    def delete_many(self, codes: Iterable[str]) -> int:
        """Delete every listed code that still exists, writing one snapshot

        Returns:
            int: number of records actually deleted.
        """
        with self._lock:
            removed = {code: self._records.pop(code) for code in set(codes) if code in self._records}
            if not removed:
                return 0

            try:
                self._persist()
            except Exception:
                self._records.update(removed)
                raise
            return len(removed)

    def list(self) -> Iterator[tuple[str, LinkRecordModel]]:
        # Copy under the lock, iterate outside of it: one point-in-time view per call
        with self._lock:
            items = list(self._records.items())
        return iter(items)

    def allocate_id(self) -> int:
        with self._lock:
            self._counter += 1
            return self._counter

    def count(self) -> int:
        with self._lock:
            return self._counter

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __repr__(self) -> str:
        return f'<LinkJsonDAO path={str(self.path)!r}>'
