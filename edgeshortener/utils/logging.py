"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` in the lambda handler's `__init__.py` file
before any other logging is done.

Logging format (one JSON object per line, `extra` fields at top level):
{
    "timestamp": "2025-12-26T12:00:00.000Z",
    "level": "INFO",
    "logger": "edgeshortener.services.resolution",
    "message": "Redirecting client to target URL.",
    "hash": "5d1c...",
    "event": "REDIRECT_SUCCESS"
}
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from edgeshortener.constants import ENV


# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED = frozenset(logging.LogRecord('', logging.INFO, '', 0, '', None, None).__dict__) | {'message', 'asctime'}


class JsonFormatter(logging.Formatter):
    """Render a LogRecord, its `extra` fields and any traceback as one JSON line"""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec='milliseconds')
        log = {
            'timestamp': timestamp.replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        log.update((key, value) for key, value in record.__dict__.items() if key not in _RESERVED)

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)
        if record.stack_info:
            log['stack'] = self.formatStack(record.stack_info)

        # Extras may carry bytes or exceptions
        return json.dumps(log, default=str)


def initialize_logging() -> None:
    log_level = os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper()
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {'json': {'()': JsonFormatter}},
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'root': {'level': log_level, 'handlers': ['stdout']},
            # Engine and AWS SDK chatter stays below the application's logs
            'loggers': {
                'sqlalchemy': {'level': 'WARNING'},
                'botocore': {'level': 'WARNING'},
                'urllib3': {'level': 'WARNING'},
            },
        }
    )
