"""Runtime utilities

Functions:
    running_locally() -> bool:
        True if the service runs on a developer machine, False otherwise.

Example:
    >>> from snaplink.utils.runtime import running_locally
    >>> os.environ['APP_ENV'] = 'local'
    >>> running_locally()
    True
    >>> os.environ['APP_ENV'] = 'prod'
    >>> running_locally()
    False
"""

import os

from snaplink.constants import ENV


def running_locally() -> bool:
    """Check if the service is running in the local environment

    Returns:
        bool: True if APP_ENV is unset or 'local', False otherwise.
    """
    return os.getenv(ENV.App.APP_ENV, 'local').lower() == 'local'
