"""Link expiry evaluation and purging.

Functions:
    is_expired(record, now) -> bool:
        Decide whether a record's TTL has elapsed at `now`.
    sweep_expired(dao, now=None) -> int:
        Delete every expired record from a store in one pass.

Classes:
    ExpirySweeper:
        PeriodicTask running sweep_expired() (every 24 hours by default).
"""

import logging

from snaplink.constants import Interval
from snaplink.models import LinkRecordModel
from snaplink.dao.base import LinkBaseDAO
from snaplink.services.periodic import PeriodicTask
from snaplink.utils.helpers import now_timestamp


logger = logging.getLogger(__name__)


def is_expired(record: LinkRecordModel, now: int) -> bool:
    """Return True iff `now` is strictly past the record's expiry instant

    A record is still valid at exactly `created_at + ttl_seconds`. Records with
    `ttl_seconds == 0` never expire.

    Example:
        >>> record = LinkRecordModel(target='https://example.com', created_at=100, ttl_seconds=10)
        >>> is_expired(record, 110), is_expired(record, 111)
        (False, True)
    """
    if record.ttl_seconds == 0:
        return False
    return now > record.created_at + record.ttl_seconds


def sweep_expired(dao: LinkBaseDAO, now: int | None = None) -> int:
    """Delete every record that is expired at `now`

    Walks `dao.list()` once and hands the expired codes to `dao.delete_many()`,
    which skips records deleted concurrently or failing to delete so one bad
    entry doesn't abort the sweep.

    Args:
        dao (LinkBaseDAO):
            Store to purge.
        now (int | None):
            Unix timestamp to evaluate expiry against. Defaults to the current time.

    Returns:
        int: number of records deleted.

    Raises:
        DataStoreError:
            If the store can't be enumerated (or a batched delete fails).
    """
    now = now_timestamp() if now is None else now
    expired = [code for code, record in dao.list() if is_expired(record, now)]

    deleted = dao.delete_many(expired)
    logger.info('Expired links cleaned up.', extra={'deleted': deleted, 'candidates': len(expired)})
    return deleted


class ExpirySweeper(PeriodicTask):
    """Purge expired links from a store on a fixed period."""

    def __init__(self, dao: LinkBaseDAO, interval: float = Interval.EXPIRY_SWEEP):
        super().__init__('expiry-sweep', interval, lambda: sweep_expired(dao))
        self.dao = dao
