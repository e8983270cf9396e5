"""Unit tests for LinkService in link_service.py.

Test coverage includes:

1. Shorten
   - Generated codes follow the counter (first code is '1') with the default TTL.
   - Custom codes are stored create-only; conflicts leave the existing link untouched.
   - Invalid URL, custom code and TTL raise InvalidInputError.
   - Generated codes taken by custom codes are skipped.
   - The admission limiter gates shorten() per client.
   - Store failures (including Redis command errors) raise AllocationFailureError.

2. Redirect
   - Clicks are counted atomically on every successful redirect.
   - A link deleted mid-redirect stays deleted and answers NotFoundError.
   - Expired links raise GoneError and keep their click count.
   - Unknown or malformed codes raise NotFoundError.

3. Info / list / delete
   - Info projections report expiry state.
   - Listing includes expired links.
   - Store failures raise StorageError.
"""

from unittest.mock import MagicMock
from concurrent.futures import ThreadPoolExecutor

import pytest
import redis

from snaplink.constants import TTL
from snaplink.models import LinkRecordModel, ShortenRequestModel
from snaplink.dao import LinkBaseDAO, LinkJsonDAO, LinkRedisDAO
from snaplink.dao.exceptions import DataStoreError, LinkAlreadyExistsError, LinkNotFoundError
from snaplink.exceptions import (
    AllocationFailureError,
    ConflictError,
    GoneError,
    InvalidInputError,
    NotFoundError,
    RateLimitedError,
    StorageError,
)
from snaplink.services.admission_limiter import AdmissionLimiter
from snaplink.services.link_service import LinkService, is_valid_url


T = 1760486400


class FakeClock:
    def __init__(self, now: int = T):
        self.now = now

    def __call__(self) -> int:
        return self.now


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def dao(tmp_path) -> LinkJsonDAO:
    return LinkJsonDAO(tmp_path / 'store.json')


@pytest.fixture
def limiter(clock) -> AdmissionLimiter:
    return AdmissionLimiter(max_requests=5, window_seconds=60, clock=clock)


@pytest.fixture
def service(dao, limiter, clock) -> LinkService:
    return LinkService(dao, limiter=limiter, clock=clock)


@pytest.fixture
def failing_dao() -> MagicMock:
    dao = MagicMock(spec=LinkBaseDAO)
    error = DataStoreError('unreachable')
    for method in (dao.put, dao.get, dao.delete, dao.hit, dao.list, dao.allocate_id):
        method.side_effect = error
    return dao


# -------------------------------
# 1. Shorten
# -------------------------------


@pytest.mark.parametrize(
    'url, expected',
    [
        ('https://example.com', True),
        ('http://example.com/path?q=1', True),
        ('ftp://example.com', False),
        ('example.com', False),
        ('', False),
    ],
)
def test_is_valid_url(url, expected):
    assert is_valid_url(url) is expected


def test_shorten_generated_code(service, dao):
    code = service.shorten('https://example.com')

    assert code == '1'
    assert dao.get('1') == LinkRecordModel(target='https://example.com', created_at=T, ttl_seconds=TTL.DEFAULT)


def test_shorten_generated_codes_are_sequential(service):
    codes = [service.shorten(f'https://example.com/{i}') for i in range(63)]

    assert codes[:3] == ['1', '2', '3']
    assert codes[-1] == '11'
    assert len(set(codes)) == 63


def test_shorten_with_ttl(service, dao):
    code = service.shorten('https://example.com', ttl_seconds=10)
    assert dao.get(code).ttl_seconds == 10


def test_shorten_zero_ttl_uses_default(service, dao):
    code = service.shorten('https://example.com', ttl_seconds=0)
    assert dao.get(code).ttl_seconds == TTL.DEFAULT


def test_never_expiring_policy(dao, clock):
    service = LinkService(dao, default_ttl_seconds=TTL.NEVER, clock=clock)
    code = service.shorten('https://example.com')

    clock.now += 10 * TTL.DEFAULT
    assert service.redirect(code) == 'https://example.com'
    assert service.info(code).expires_at is None


def test_shorten_custom_code(service, dao):
    assert service.shorten('https://example.com', custom_code='promo') == 'promo'
    assert dao.get('promo').target == 'https://example.com'
    assert dao.count() == 0


def test_shorten_custom_code_conflict(service, dao):
    service.shorten('https://example.com/first', custom_code='promo')

    with pytest.raises(ConflictError) as excinfo:
        service.shorten('https://example.com/second', custom_code='promo')

    assert excinfo.value.as_pair() == ('Conflict', 'Custom code already in use')
    assert excinfo.value.status_code == 409
    assert dao.get('promo').target == 'https://example.com/first'


@pytest.mark.parametrize(
    'params, message',
    [
        ({'target_url': 'example.com'}, 'Invalid URL. Must start with http:// or https://'),
        ({'target_url': 'https://example.com', 'custom_code': 'bad code!'}, 'Invalid custom code. Use only letters and numbers.'),
        ({'target_url': 'https://example.com', 'custom_code': 'ü'}, 'Invalid custom code. Use only letters and numbers.'),
        ({'target_url': 'https://example.com', 'ttl_seconds': -5}, 'Invalid expiry. Must be a positive number of seconds.'),
    ],
)
def test_shorten_invalid_input(service, dao, params, message):
    with pytest.raises(InvalidInputError) as excinfo:
        service.shorten(**params)

    assert excinfo.value.message == message
    assert excinfo.value.status_code == 400
    assert len(dao) == 0


def test_generated_code_skips_custom_code(service, dao):
    service.shorten('https://example.com/custom', custom_code='1')

    assert service.shorten('https://example.com') == '2'
    assert dao.get('1').target == 'https://example.com/custom'


def test_generated_code_gives_up_after_max_attempts(clock):
    dao = MagicMock(spec=LinkBaseDAO)
    dao.allocate_id.side_effect = range(1, 100)
    dao.put.side_effect = LinkAlreadyExistsError('taken')
    service = LinkService(dao, clock=clock)

    with pytest.raises(AllocationFailureError):
        service.shorten('https://example.com')

    assert dao.put.call_count == 5


def test_shorten_store_failure(failing_dao, clock):
    service = LinkService(failing_dao, clock=clock)

    with pytest.raises(AllocationFailureError, match='Failed to generate short code'):
        service.shorten('https://example.com')
    with pytest.raises(AllocationFailureError, match='Error saving URL'):
        service.shorten('https://example.com', custom_code='promo')


def test_shorten_redis_command_failure(clock):
    redis_client = MagicMock(
        spec=redis.Redis,
        connection_pool=MagicMock(spec=redis.ConnectionPool, connection_kwargs={'host': 'redis', 'port': 6379, 'db': 0}),
    )
    redis_client.ping.return_value = True
    redis_client.incr.side_effect = redis.exceptions.ResponseError('OOM command not allowed when used memory > maxmemory')
    service = LinkService(LinkRedisDAO(redis_client=redis_client, prefix='snaplink:test'), clock=clock)

    with pytest.raises(AllocationFailureError, match='Failed to generate short code') as excinfo:
        service.shorten('https://example.com')

    assert excinfo.value.status_code == 500
    redis_client.set.assert_not_called()


def test_shorten_rate_limited(service, dao):
    for i in range(5):
        service.shorten(f'https://example.com/{i}', client_id='203.0.113.7')

    with pytest.raises(RateLimitedError):
        service.shorten('https://example.com/5', client_id='203.0.113.7')

    assert len(dao) == 5
    assert service.shorten('https://example.com/other', client_id='198.51.100.1')


def test_rate_limit_counts_rejected_input(service):
    for _ in range(5):
        with pytest.raises(InvalidInputError):
            service.shorten('not a url', client_id='203.0.113.7')

    with pytest.raises(RateLimitedError):
        service.shorten('https://example.com', client_id='203.0.113.7')


def test_shorten_without_client_id_is_not_limited(service):
    for i in range(10):
        service.shorten(f'https://example.com/{i}')


def test_shorten_request(service, dao):
    request = ShortenRequestModel(url='https://example.com', custom_code='promo', expiry_seconds=60, client_id='203.0.113.7')

    assert service.shorten_request(request) == 'promo'
    assert dao.get('promo').ttl_seconds == 60


# -------------------------------
# 2. Redirect
# -------------------------------


def test_redirect_counts_clicks(service, dao):
    code = service.shorten('https://example.com')

    assert service.redirect(code) == 'https://example.com'
    assert service.redirect(code) == 'https://example.com'
    assert dao.get(code).clicks == 2


def test_redirect_at_expiry_instant(service, clock):
    code = service.shorten('https://example.com', ttl_seconds=10)
    clock.now = T + 10
    assert service.redirect(code) == 'https://example.com'


def test_redirect_expired_link(service, dao, clock):
    code = service.shorten('https://example.com', ttl_seconds=10)
    clock.now = T + 11

    with pytest.raises(GoneError) as excinfo:
        service.redirect(code)

    assert excinfo.value.as_pair() == ('Gone', 'URL expired')
    assert excinfo.value.status_code == 410
    assert dao.get(code).clicks == 0


@pytest.mark.parametrize('code', ['missing', 'bad/code', ''])
def test_redirect_unknown_code(service, code):
    with pytest.raises(NotFoundError) as excinfo:
        service.redirect(code)

    assert excinfo.value.as_pair() == ('NotFound', 'Short URL not found')


def test_redirect_click_update_failure(clock):
    dao = MagicMock(spec=LinkBaseDAO)
    dao.get.return_value = LinkRecordModel(target='https://example.com', created_at=T, ttl_seconds=60)
    dao.hit.side_effect = DataStoreError('disk full')
    service = LinkService(dao, clock=clock)

    with pytest.raises(StorageError, match='Failed to update clicks'):
        service.redirect('abc')

    dao.hit.assert_called_once_with('abc')
    dao.put.assert_not_called()


def test_redirect_does_not_revive_deleted_link(tmp_path, clock):
    class DeletedAfterReadDAO(LinkJsonDAO):
        def get(self, code):
            record = super().get(code)
            self.delete(code)  # a concurrent delete lands between the read and the click
            return record

    dao = DeletedAfterReadDAO(tmp_path / 'store.json')
    dao.put('promo', LinkRecordModel(target='https://example.com', created_at=T, ttl_seconds=60))
    service = LinkService(dao, clock=clock)

    with pytest.raises(NotFoundError, match='Short URL not found'):
        service.redirect('promo')

    assert len(dao) == 0
    with pytest.raises(LinkNotFoundError):
        LinkJsonDAO(tmp_path / 'store.json').get('promo')


def test_concurrent_redirects_are_all_counted(service, dao):
    code = service.shorten('https://example.com')

    with ThreadPoolExecutor(max_workers=8) as pool:
        targets = list(pool.map(lambda _: service.redirect(code), range(100)))

    assert set(targets) == {'https://example.com'}
    assert dao.get(code).clicks == 100


def test_redirect_store_failure(failing_dao, clock):
    with pytest.raises(StorageError):
        LinkService(failing_dao, clock=clock).redirect('abc')


# -------------------------------
# 3. Info / list / delete
# -------------------------------


def test_info(service, clock):
    code = service.shorten('https://example.com', ttl_seconds=10)
    service.redirect(code)

    info = service.info(code)
    assert (info.code, info.target, info.clicks, info.expires_at, info.is_expired) == (code, 'https://example.com', 1, T + 10, False)

    clock.now = T + 11
    assert service.info(code).is_expired is True


def test_info_unknown_code(service):
    with pytest.raises(NotFoundError):
        service.info('missing')


def test_list_all_includes_expired(service, clock):
    service.shorten('https://example.com/short', ttl_seconds=10)
    service.shorten('https://example.com/long', custom_code='long')
    clock.now = T + 11

    listing = {info.code: info.is_expired for info in service.list_all()}
    assert listing == {'1': True, 'long': False}


def test_list_all_store_failure(failing_dao, clock):
    with pytest.raises(StorageError, match='Failed to list URLs'):
        list(LinkService(failing_dao, clock=clock).list_all())


def test_delete_code(service, dao):
    code = service.shorten('https://example.com')
    service.delete_code(code)

    with pytest.raises(NotFoundError):
        service.redirect(code)
    assert len(dao) == 0


def test_delete_unknown_code(service):
    with pytest.raises(NotFoundError, match='Short URL not found'):
        service.delete_code('missing')


def test_delete_store_failure(failing_dao, clock):
    with pytest.raises(StorageError):
        LinkService(failing_dao, clock=clock).delete_code('abc')


def test_delete_missing_in_store(clock):
    dao = MagicMock(spec=LinkBaseDAO)
    dao.delete.side_effect = LinkNotFoundError('missing')

    with pytest.raises(NotFoundError):
        LinkService(dao, clock=clock).delete_code('abc')


def test_negative_default_ttl(dao):
    with pytest.raises(ValueError):
        LinkService(dao, default_ttl_seconds=-1)
