"""Unit tests for expiry evaluation and sweeping in expiry.py.

Test coverage includes:

1. is_expired()
   - A record is valid up to and including created_at + ttl_seconds.
   - Records with ttl_seconds == 0 never expire.

2. sweep_expired()
   - Only expired records are removed; the count of deletions is returned.
   - The JSON store purges with one batched delete_many() call.
   - The default delete_many() skips per-record failures.

3. ExpirySweeper
   - Wraps sweep_expired() in a periodic task.
"""

from unittest.mock import MagicMock

import pytest

from snaplink.models import LinkRecordModel
from snaplink.dao import LinkBaseDAO, LinkJsonDAO
from snaplink.dao.exceptions import DataStoreError, LinkNotFoundError
from snaplink.services.expiry import ExpirySweeper, is_expired, sweep_expired


T = 1760486400


def make_record(ttl_seconds: int, created_at: int = T) -> LinkRecordModel:
    return LinkRecordModel(target='https://example.com', created_at=created_at, ttl_seconds=ttl_seconds)


# -------------------------------
# 1. is_expired()
# -------------------------------


@pytest.mark.parametrize(
    'now, expected',
    [
        (T, False),
        (T + 10, False),
        (T + 11, True),
    ],
)
def test_is_expired_boundary(now, expected):
    assert is_expired(make_record(10), now) is expected


def test_never_expiring_record():
    assert is_expired(make_record(0), T + 10**9) is False


# -------------------------------
# 2. sweep_expired()
# -------------------------------


def test_sweep_removes_only_expired(tmp_path):
    dao = LinkJsonDAO(tmp_path / 'store.json')
    dao.put('old', make_record(10)).put('fresh', make_record(604800)).put('forever', make_record(0))

    assert sweep_expired(dao, now=T + 11) == 1
    assert sorted(code for code, _ in dao.list()) == ['forever', 'fresh']


def test_sweep_uses_delete_many(tmp_path, monkeypatch):
    dao = LinkJsonDAO(tmp_path / 'store.json')
    dao.put('a', make_record(10)).put('b', make_record(10))
    delete = MagicMock(wraps=dao.delete)
    monkeypatch.setattr(dao, 'delete', delete)

    assert sweep_expired(dao, now=T + 100) == 2
    delete.assert_not_called()
    assert len(dao) == 0


def test_sweep_with_nothing_expired(tmp_path):
    dao = LinkJsonDAO(tmp_path / 'store.json')
    dao.put('fresh', make_record(604800))
    assert sweep_expired(dao, now=T) == 0


def test_sweep_skips_failing_deletes():
    dao = MagicMock(spec=LinkBaseDAO)
    dao.list.return_value = iter(
        [
            ('gone', make_record(10)),
            ('broken', make_record(10)),
            ('old', make_record(10)),
            ('fresh', make_record(604800)),
        ]
    )
    failures = {'gone': LinkNotFoundError('gone'), 'broken': DataStoreError('broken')}

    def delete(code):
        if code in failures:
            raise failures[code]

    dao.delete.side_effect = delete
    dao.delete_many.side_effect = lambda codes: LinkBaseDAO.delete_many(dao, codes)

    assert sweep_expired(dao, now=T + 11) == 1
    assert [call.args[0] for call in dao.delete.call_args_list] == ['gone', 'broken', 'old']


def test_sweep_propagates_listing_failure():
    dao = MagicMock(spec=LinkBaseDAO)
    dao.list.side_effect = DataStoreError('unreachable')

    with pytest.raises(DataStoreError):
        sweep_expired(dao, now=T)


# -------------------------------
# 3. ExpirySweeper
# -------------------------------


def test_expiry_sweeper(tmp_path):
    dao = LinkJsonDAO(tmp_path / 'store.json')
    dao.put('old', make_record(10, created_at=0))
    sweeper = ExpirySweeper(dao, interval=3600)

    assert sweeper.name == 'expiry-sweep'
    assert sweeper.interval == 3600
    assert sweeper.run_once() == 1
    assert len(dao) == 0
