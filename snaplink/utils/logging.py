"""JSON logging to stdout

Every log line is one JSON object with timestamp, level, logger and message,
plus whatever was passed via `extra=` (shortcode, client_id, path, ...).
`snaplink.app.create_app` calls `initialize_logging()` once at startup.
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from snaplink.constants import ENV


# Attributes every LogRecord carries; anything else came in through `extra=`
_RESERVED = frozenset(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime', 'taskName'}


def _iso_timestamp(created: float) -> str:
    stamp = datetime.fromtimestamp(created, tz=UTC).isoformat(timespec='milliseconds')
    return stamp.replace('+00:00', 'Z')


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': _iso_timestamp(record.created),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        payload.update((key, value) for key, value in vars(record).items() if key not in _RESERVED)

        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def initialize_logging(level: str | None = None) -> None:
    """Route the root logger to stdout through JsonFormatter.

    The level comes from `level`, else the LOG_LEVEL env var, else INFO.
    """
    root_level = (level or os.getenv(ENV.App.LOG_LEVEL, 'INFO')).upper()
    handler = {'class': 'logging.StreamHandler', 'formatter': 'json', 'stream': 'ext://sys.stdout'}

    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {'json': {'()': JsonFormatter}},
            'handlers': {'stdout': handler},
            'root': {'level': root_level, 'handlers': ['stdout']},
        }
    )
