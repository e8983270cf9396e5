"""Link service: the operation set exposed to the HTTP layer.

LinkService composes the admission limiter, the code allocator, the link store
and expiry evaluation into five operations:

    shorten(target_url, custom_code=None, ttl_seconds=None, client_id=None) -> str
    redirect(code) -> str
    info(code) -> LinkInfoModel
    list_all() -> Iterator[LinkInfoModel]
    delete_code(code) -> None

Every failure is raised as a LinkServiceError subclass whose `kind` and
`status_code` the transport layer maps to a response:

    InvalidInputError       400
    ConflictError           409
    NotFoundError           404
    GoneError               410
    RateLimitedError        429
    AllocationFailureError  500
    StorageError            500

Example:
    >>> service = LinkService(LinkJsonDAO('store.json'), limiter=AdmissionLimiter())
    >>> code = service.shorten('https://example.com', client_id='203.0.113.7')
    >>> service.redirect(code)
    'https://example.com'
    >>> service.info(code).clicks
    1
"""

import logging
from collections.abc import Callable, Iterator
from typing import Optional

from snaplink.constants import TTL, MAX_ALLOCATION_ATTEMPTS
from snaplink.models import LinkRecordModel, LinkInfoModel, ShortenRequestModel
from snaplink.dao.base import LinkBaseDAO, PutMode
from snaplink.dao.exceptions import DataStoreError, LinkAlreadyExistsError, LinkNotFoundError
from snaplink.exceptions import (
    AllocationFailureError,
    ConflictError,
    GoneError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from snaplink.services.admission_limiter import AdmissionLimiter
from snaplink.services.expiry import is_expired
from snaplink.utils.helpers import now_timestamp
from snaplink.utils.shortener import CodeAllocator, validate_code


logger = logging.getLogger(__name__)


def is_valid_url(url: str) -> bool:
    return isinstance(url, str) and (url.startswith('http://') or url.startswith('https://'))


class LinkService:
    """Orchestrate link creation, redirection, inspection and deletion.

    Attributes:
        dao (LinkBaseDAO):
            Link store (in-process JSON or Redis).
        limiter (Optional[AdmissionLimiter]):
            Gate for shorten(); disabled when None.
        default_ttl_seconds (int):
            TTL applied when the caller gives none (or 0). Setting it to 0 is the
            policy switch for links that never expire.
        allocator (CodeAllocator):
            Generates codes from the store's counter.
    """

    def __init__(
        self,
        dao: LinkBaseDAO,
        limiter: Optional[AdmissionLimiter] = None,
        default_ttl_seconds: int = TTL.DEFAULT,
        clock: Callable[[], int] = now_timestamp,
    ):
        if default_ttl_seconds < 0:
            raise ValueError(f'Default TTL must be a non-negative integer (given value: {default_ttl_seconds}).')

        self.dao = dao
        self.limiter = limiter
        self.default_ttl_seconds = default_ttl_seconds
        self.allocator = CodeAllocator(dao)
        self._clock = clock

    # -------------------------------
    # Shorten
    # -------------------------------

    def shorten(
        self,
        target_url: str,
        custom_code: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
        client_id: Optional[str] = None,
    ) -> str:
        """Create a short link and return its code

        Procedure:
        - Step 1: Admit the client through the limiter (if both are given)
        - Step 2: Validate target URL and TTL
        - Step 3: Store under the custom code (create-only) or a freshly allocated code

        Raises:
            RateLimitedError: client exceeded its admission window.
            InvalidInputError: URL without http(s) scheme, bad custom code or negative TTL.
            ConflictError: custom code already taken.
            AllocationFailureError: the store failed to allocate or persist the link.
        """
        # 1- Admission gate
        if self.limiter is not None and client_id is not None:
            self.limiter.admit(client_id)

        # 2- Validate input
        if not is_valid_url(target_url):
            raise InvalidInputError('Invalid URL. Must start with http:// or https://')
        record = LinkRecordModel(
            target=target_url,
            created_at=self._clock(),
            ttl_seconds=self._resolve_ttl(ttl_seconds),
        )

        # 3- Store the link
        if custom_code:
            return self._store_custom(custom_code, record)
        return self._store_generated(record)

    def shorten_request(self, request: ShortenRequestModel) -> str:
        return self.shorten(
            request.url,
            custom_code=request.custom_code,
            ttl_seconds=request.expiry_seconds,
            client_id=request.client_id,
        )

    def _resolve_ttl(self, ttl_seconds: Optional[int]) -> int:
        if ttl_seconds is None or ttl_seconds == 0:
            return self.default_ttl_seconds
        if not isinstance(ttl_seconds, int) or isinstance(ttl_seconds, bool) or ttl_seconds < 0:
            raise InvalidInputError('Invalid expiry. Must be a positive number of seconds.')
        return ttl_seconds

    def _store_custom(self, code: str, record: LinkRecordModel) -> str:
        if not validate_code(code):
            raise InvalidInputError('Invalid custom code. Use only letters and numbers.')

        try:
            self.dao.put(code, record, mode=PutMode.CREATE_ONLY)
        except LinkAlreadyExistsError:
            logger.info('Custom code already in use.', extra={'shortcode': code})
            raise ConflictError('Custom code already in use') from None
        except DataStoreError as e:
            logger.exception('Failed to store link under custom code.', extra={'shortcode': code})
            raise AllocationFailureError('Error saving URL') from e

        logger.info('Shortened URL with custom code.', extra={'shortcode': code, 'ttl_seconds': record.ttl_seconds})
        return code

    def _store_generated(self, record: LinkRecordModel) -> str:
        # A generated code can only collide with a custom code of the same text;
        # skip ahead to the next counter value in that case
        for attempt in range(1, MAX_ALLOCATION_ATTEMPTS + 1):
            try:
                code = self.allocator.next_code()
                self.dao.put(code, record, mode=PutMode.CREATE_ONLY)
            except LinkAlreadyExistsError:
                logger.warning('Generated code is taken by a custom code.', extra={'shortcode': code, 'attempt': attempt})
                continue
            except DataStoreError as e:
                logger.exception('Failed to allocate short code.')
                raise AllocationFailureError('Failed to generate short code') from e

            logger.info('Shortened URL.', extra={'shortcode': code, 'ttl_seconds': record.ttl_seconds})
            return code

        raise AllocationFailureError(f'Failed to generate short code after {MAX_ALLOCATION_ATTEMPTS} attempts')

    # -------------------------------
    # Redirect, inspect, list, delete
    # -------------------------------

    def redirect(self, code: str) -> str:
        """Count a click and return the target URL

        The click itself is an atomic increment in the store, so concurrent
        redirects are all counted and a code deleted between the expiry check
        and the increment stays deleted (NotFoundError).

        Raises:
            NotFoundError: unknown code.
            GoneError: the link expired (clicks unchanged).
            StorageError: the store failed.
        """
        record = self._get(code)
        if is_expired(record, self._clock()):
            logger.info('Short URL expired.', extra={'shortcode': code})
            raise GoneError('URL expired')

        try:
            record = self.dao.hit(code)
        except LinkNotFoundError:
            logger.info('Short URL deleted during redirect.', extra={'shortcode': code})
            raise NotFoundError('Short URL not found') from None
        except DataStoreError as e:
            logger.exception('Failed to update clicks.', extra={'shortcode': code})
            raise StorageError('Failed to update clicks') from e

        logger.debug('Redirecting client to target URL.', extra={'shortcode': code})
        return record.target

    def info(self, code: str) -> LinkInfoModel:
        record = self._get(code)
        return LinkInfoModel.from_record(code, record, is_expired(record, self._clock()))

    def list_all(self) -> Iterator[LinkInfoModel]:
        """Yield an info projection for every stored link, expired ones included."""
        now = self._clock()
        try:
            for code, record in self.dao.list():
                yield LinkInfoModel.from_record(code, record, is_expired(record, now))
        except DataStoreError as e:
            logger.exception('Failed to list URLs.')
            raise StorageError('Failed to list URLs') from e

    def delete_code(self, code: str) -> None:
        try:
            self.dao.delete(code)
        except LinkNotFoundError:
            raise NotFoundError('Short URL not found') from None
        except DataStoreError as e:
            logger.exception('Failed to delete short URL.', extra={'shortcode': code})
            raise StorageError('Failed to delete short URL') from e

        logger.info('Deleted short URL.', extra={'shortcode': code})

    def _get(self, code: str) -> LinkRecordModel:
        if not validate_code(code):
            raise NotFoundError('Short URL not found')

        try:
            return self.dao.get(code)
        except LinkNotFoundError:
            raise NotFoundError('Short URL not found') from None
        except DataStoreError as e:
            logger.exception('Failed to read short URL.', extra={'shortcode': code})
            raise StorageError('Failed to read short URL') from e
