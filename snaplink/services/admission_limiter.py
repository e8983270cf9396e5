"""Per-client admission limiter guarding link creation.

The limiter is a fixed-window counter keyed by an opaque client identity
(usually the source IP). For each client it tracks when the current window
started and how many attempts it admitted:

    - no entry, or the window is older than `window_seconds`: start a new
      window with count 1 and admit;
    - count below `max_requests`: increment and admit;
    - otherwise: reject with RateLimitedError.

Bursts straddling a window boundary can reach twice the nominal rate. That is
acceptable for abuse deterrence, not for exact quotas.

Idle entries are dropped by evict(), which LimiterEvictor runs every minute.
"""

import math
import time
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from snaplink.constants import DefaultLimit, Interval
from snaplink.exceptions import RateLimitedError
from snaplink.services.periodic import PeriodicTask


logger = logging.getLogger(__name__)


@dataclass
class ClientWindow:
    window_start: float
    count: int
    last_seen: float


class AdmissionLimiter:
    """Fixed-window request counter per client identity.

    Attributes:
        max_requests (int):
            Attempts admitted per client within one window.
        window_seconds (float):
            Window length.
        stale_after_seconds (float):
            Entries idle for longer than this are removed by evict().
    """

    def __init__(
        self,
        max_requests: int = DefaultLimit.MAX_REQUESTS,
        window_seconds: float = DefaultLimit.WINDOW_SECONDS,
        stale_after_seconds: float = DefaultLimit.STALE_AFTER_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        if max_requests < 1:
            raise ValueError(f'max_requests must be at least 1 (given value: {max_requests}).')
        if window_seconds <= 0:
            raise ValueError(f'window_seconds must be positive (given value: {window_seconds}).')

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.stale_after_seconds = stale_after_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._clients: dict[str, ClientWindow] = {}

    def admit(self, client_id: str, now: float | None = None) -> int:
        """Count an attempt for `client_id` or reject it

        Returns:
            int: the client's attempt count inside the current window.

        Raises:
            RateLimitedError:
                If the client already used `max_requests` attempts in this window.
                `retry_after` holds the seconds until the window resets.
        """
        now = self._clock() if now is None else now

        with self._lock:
            entry = self._clients.get(client_id)
            if entry is None or now - entry.window_start > self.window_seconds:
                self._clients[client_id] = ClientWindow(window_start=now, count=1, last_seen=now)
                return 1

            entry.last_seen = now
            if entry.count < self.max_requests:
                entry.count += 1
                return entry.count

            retry_after = max(1, math.ceil(entry.window_start + self.window_seconds - now))

        logger.info('Client rate limited.', extra={'client_id': client_id, 'retry_after': retry_after})
        raise RateLimitedError('Rate limit exceeded. Try again later.', retry_after=retry_after)

    def evict(self, now: float | None = None) -> int:
        """Forget clients that haven't been seen for `stale_after_seconds`

        Returns:
            int: number of entries removed.
        """
        now = self._clock() if now is None else now

        with self._lock:
            stale = [client_id for client_id, entry in self._clients.items() if now - entry.last_seen > self.stale_after_seconds]
            for client_id in stale:
                del self._clients[client_id]

        if stale:
            logger.debug('Evicted idle limiter entries.', extra={'evicted': len(stale)})
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __contains__(self, client_id: str) -> bool:
        with self._lock:
            return client_id in self._clients


class LimiterEvictor(PeriodicTask):
    """Evict idle limiter entries on a fixed period."""

    def __init__(self, limiter: AdmissionLimiter, interval: float = Interval.LIMITER_EVICTION):
        super().__init__('limiter-eviction', interval, limiter.evict)
        self.limiter = limiter
