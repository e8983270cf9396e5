"""Utility functions for application configuration management.

The service reads a single JSON configuration document. In deployed
environments the document lives in **AWS AppConfig**: each environment
(`APP_ENV`) has a dedicated AppConfig *Environment* within the AppConfig
*Application*, and the document is stored under a configuration profile.
On a developer machine (`APP_ENV=local`) the document can be read from the
file named by `SNAPLINK_CONFIG_FILE`, or omitted entirely to run on defaults.

The configuration JSON follows this structure (every key is optional and is
merged over DEFAULT_CONFIG):

    {
        "active_backend": "json",
        "build": "local",
        "configs": {
            "json": {"path": "store.json"},
            "redis": {"host": "localhost", "port": 6379, "db": 0}
        },
        "service": {"default_ttl_seconds": 604800, "base_url": "http://localhost:8080"},
        "limiter": {"max_requests": 5, "window_seconds": 60, "stale_after_seconds": 120},
        "tasks": {"sweep_interval_seconds": 86400, "eviction_interval_seconds": 60}
    }

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`) value,
        defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    load_config() -> dict
        Load the configuration document and merge it over the defaults.

Example:
    >>> from snaplink.utils.config import load_config
    >>> config = load_config()
    >>> config['active_backend']
    'json'
"""

import os
import copy
import json
import functools
import logging
from collections.abc import Callable

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from snaplink.types import AppConfig
from snaplink.constants import ENV, TTL, Interval, DefaultLimit, Backend
from snaplink.exceptions import BadConfigurationError, ConfigurationError
from snaplink.utils.helpers import require_environment
from snaplink.utils.runtime import running_locally


logger = logging.getLogger(__name__)


DEFAULT_CONFIG: AppConfig = {
    'active_backend': Backend.JSON.value,
    'build': 'local',
    'configs': {
        'json': {'path': 'store.json'},
        'redis': {'host': 'localhost', 'port': 6379, 'db': 0},
    },
    'service': {
        'default_ttl_seconds': TTL.DEFAULT,
        'base_url': 'http://localhost:8080',
    },
    'limiter': {
        'max_requests': DefaultLimit.MAX_REQUESTS,
        'window_seconds': DefaultLimit.WINDOW_SECONDS,
        'stale_after_seconds': DefaultLimit.STALE_AFTER_SECONDS,
    },
    'tasks': {
        'sweep_interval_seconds': Interval.EXPIRY_SWEEP,
        'eviction_interval_seconds': Interval.LIMITER_EVICTION,
    },
}


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'snaplink'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'snaplink:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def merge_config(base: AppConfig, override: AppConfig) -> AppConfig:
    """Recursively merge `override` into a copy of `base`."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def finalize_config(document: AppConfig) -> AppConfig:
    """Merge a raw document over the defaults and validate the backend choice

    Raises:
        BadConfigurationError:
            If the document isn't a JSON object or names an unknown backend.
    """
    if not isinstance(document, dict):
        raise BadConfigurationError(f'Configuration must be a JSON object (given type: {type(document)}).')

    config = merge_config(DEFAULT_CONFIG, document)
    backend = config['active_backend']
    if backend not in set(Backend):
        raise BadConfigurationError(f"Unknown backend '{backend}'. Expected one of: {', '.join(Backend)}.")
    return config


def _read_config_file(path: str) -> AppConfig:
    try:
        with open(path, encoding='utf-8') as f:
            return json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Can't read configuration file {path}.") from e
    except json.JSONDecodeError as e:
        raise BadConfigurationError(f'Configuration file {path} is not valid JSON.') from e


def _load_local_config(func: Callable[[], AppConfig]) -> Callable[[], AppConfig]:
    """Decorator: load configuration from the local machine when running locally

    Behavior:
        - Outside of the local environment, call the wrapped function (AWS AppConfig).
        - Locally, prefer the file named by `SNAPLINK_CONFIG_FILE`.
        - Locally without a file, use AWS AppConfig if its identifiers are set,
          else fall back to DEFAULT_CONFIG.
    """

    @functools.wraps(func)
    def wrapper() -> AppConfig:
        if not running_locally():
            return func()

        path = os.getenv(ENV.App.CONFIG_FILE)
        if path:
            logger.debug('Loading configuration from local file.', extra={'path': path})
            return finalize_config(_read_config_file(path))

        if all(os.getenv(name) for name in ENV.AppConfig):
            return func()

        logger.debug('No configuration source given. Using defaults.')
        return finalize_config({})

    return wrapper


@_load_local_config
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config() -> AppConfig:
    """Load the service configuration from AWS AppConfig

    Environment variables required:
        APPCONFIG_APP_ID       - AppConfig Application ID
        APPCONFIG_ENV_ID       - AppConfig Environment ID
        APPCONFIG_PROFILE_ID   - AppConfig Configuration Profile ID

    Returns:
        dict: The configuration document merged over DEFAULT_CONFIG.

    Raises:
        MissingEnvironmentVariableError:
            If an AppConfig identifier is not set.
        ConfigurationError:
            If AppConfig can't be reached or returns invalid JSON.
    """
    logger.debug('Trying to load configuration from AWS AppConfig.')

    try:
        appconfig = boto3.client('appconfigdata')

        # Start an AppConfig data session
        session_token = appconfig.start_configuration_session(
            ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
            EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
            ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
        )['InitialConfigurationToken']

        # Fetch the configuration
        response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
        content = response['Configuration'].read()
    except (BotoCoreError, ClientError) as e:
        raise ConfigurationError('Failed to load configuration from AWS AppConfig.') from e

    try:
        document = json.loads(content.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise BadConfigurationError('AWS AppConfig returned a document that is not valid JSON.') from e

    config = finalize_config(document)
    logger.debug('Loaded configuration from AWS AppConfig.', extra={'build': config['build']})
    return config
