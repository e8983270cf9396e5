"""Helper utilities shared across the link service.

Functions:
    now_timestamp() -> int
        Current Unix time in whole seconds (UTC)
    format_timestamp(timestamp: int) -> str
        Render a Unix timestamp as an RFC 3339 UTC string
    get_short_url(shortcode: str, base_url: str) -> str
        Get string representation of short URL for a given shortcode
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present

Example:
    >>> from snaplink.utils.helpers import get_short_url, format_timestamp
    >>> get_short_url('abc123', 'http://localhost:8080/')
    'http://localhost:8080/abc123'
    >>> format_timestamp(1760486400)
    '2025-10-15T00:00:00Z'
"""

import os
import functools
from datetime import datetime, UTC
from collections.abc import Callable

from snaplink.exceptions import MissingEnvironmentVariableError


def now_timestamp() -> int:
    """Return the current Unix time in whole seconds (UTC)."""
    return int(datetime.now(UTC).timestamp())


def format_timestamp(timestamp: int) -> str:
    """Render a Unix timestamp as an RFC 3339 UTC string

    Args:
        timestamp (int): Unix timestamp in seconds

    Returns:
        str: e.g. '2025-10-15T00:00:00Z'
    """
    return datetime.fromtimestamp(timestamp, tz=UTC).strftime('%Y-%m-%dT%H:%M:%SZ')


def get_short_url(shortcode: str, base_url: str) -> str:
    """Get string representation of shortened URL

    Args:
        shortcode (str): shortcode
        base_url (str): public base URL of the redirect endpoint

    Returns:
        str: short url string representation
    """
    return f'{base_url.rstrip("/")}/{shortcode}'


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator
