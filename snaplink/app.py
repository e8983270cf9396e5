"""Application wiring

Builds the link service and its background tasks from the configuration
document (see snaplink.utils.config). The HTTP layer owns the process; it calls
create_app() at startup, app.start() to launch the periodic tasks and
app.stop() on shutdown.

Example:
    >>> app = create_app()
    >>> app.start()
    >>> code = app.service.shorten('https://example.com', client_id='203.0.113.7')
    >>> app.short_url(code)
    'http://localhost:8080/1'
    >>> app.stop()
"""

import logging
from dataclasses import dataclass, field

from snaplink.types import AppConfig
from snaplink.constants import Backend
from snaplink.dao.base import LinkBaseDAO
from snaplink.dao.json import LinkJsonDAO
from snaplink.dao.redis import LinkRedisDAO
from snaplink.exceptions import BadConfigurationError
from snaplink.services import AdmissionLimiter, ExpirySweeper, LimiterEvictor, LinkService, PeriodicTask
from snaplink.utils import app_prefix, get_short_url, initialize_logging, load_config


logger = logging.getLogger(__name__)


def build_dao(config: AppConfig) -> LinkBaseDAO:
    """Instantiate the link store selected by `active_backend`

    Raises:
        BadConfigurationError: on an unknown backend or missing backend section.
        DataStoreError: if the backend can't be reached or its snapshot can't be loaded.
    """
    backend = config['active_backend']
    backend_config = config.get('configs', {}).get(backend)
    if backend_config is None:
        raise BadConfigurationError(f"Missing configuration section for backend '{backend}'.")

    if backend == Backend.JSON:
        logger.debug('Using the in-process JSON store.', extra={'path': backend_config['path']})
        return LinkJsonDAO(backend_config['path'])

    if backend == Backend.REDIS:
        logger.debug('Using Redis as the link store.')
        redis_config = {f'redis_{k}': v for k, v in backend_config.items()}
        return LinkRedisDAO(**redis_config, prefix=app_prefix())

    raise BadConfigurationError(f"Unknown backend '{backend}'.")


@dataclass
class SnapLinkApp:
    service: LinkService
    dao: LinkBaseDAO
    limiter: AdmissionLimiter
    base_url: str = 'http://localhost:8080'
    tasks: list[PeriodicTask] = field(default_factory=list)

    def start(self) -> 'SnapLinkApp':
        for task in self.tasks:
            task.start()
        return self

    def stop(self, timeout: float | None = 5.0) -> bool:
        """Stop background tasks between cycles

        Returns:
            bool: True if every task stopped within `timeout`.
        """
        results = [task.stop(timeout) for task in self.tasks]
        stopped = all(results)
        if not stopped:
            logger.warning('Some background tasks did not stop in time.')
        return stopped

    def short_url(self, code: str) -> str:
        return get_short_url(code, self.base_url)


def create_app(config: AppConfig | None = None, configure_logging: bool = True) -> SnapLinkApp:
    """Build a ready-to-start application from configuration

    Args:
        config (AppConfig | None):
            Configuration document. Loaded with load_config() when None.
        configure_logging (bool):
            Install JSON logging on stdout.

    Returns:
        SnapLinkApp: service plus (not yet started) expiry sweep and limiter eviction tasks.
    """
    if configure_logging:
        initialize_logging()
    if config is None:
        config = load_config()

    dao = build_dao(config)

    limiter_config = config['limiter']
    limiter = AdmissionLimiter(
        max_requests=int(limiter_config['max_requests']),
        window_seconds=float(limiter_config['window_seconds']),
        stale_after_seconds=float(limiter_config['stale_after_seconds']),
    )

    service_config = config['service']
    service = LinkService(dao, limiter=limiter, default_ttl_seconds=int(service_config['default_ttl_seconds']))

    tasks_config = config['tasks']
    tasks = [
        ExpirySweeper(dao, interval=float(tasks_config['sweep_interval_seconds'])),
        LimiterEvictor(limiter, interval=float(tasks_config['eviction_interval_seconds'])),
    ]

    logger.info('Application configured.', extra={'backend': config['active_backend'], 'build': config.get('build')})
    return SnapLinkApp(service=service, dao=dao, limiter=limiter, base_url=service_config['base_url'], tasks=tasks)
