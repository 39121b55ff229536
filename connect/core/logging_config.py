"""
Logging setup for the Connect API and its Celery worker.

Production emits one JSON object per line; development gets plain text.
Both paths run records through SecretRedactionFilter so a bearer or refresh
token pasted into a message never reaches the log sink.
"""

import logging
import re
import sys
from typing import Any, Dict
from datetime import datetime, timezone
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "connect-api"

# header.payload.signature, base64url segments
_JWT_PATTERN = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]+")


_REDACTED = "[REDACTED_TOKEN]"
_traceback_formatter = logging.Formatter()


class SecretRedactionFilter(logging.Filter):
    """
    Replace anything shaped like a JWT in the message, the traceback and the
    stack info.

    Tracebacks are rendered here and stored redacted in exc_text with
    exc_info cleared, so downstream formatters print the redacted text
    instead of formatting the live exception again.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if _JWT_PATTERN.search(message):
            record.msg = _JWT_PATTERN.sub(_REDACTED, message)
            record.args = None

        if record.exc_info:
            if not record.exc_text:
                record.exc_text = _traceback_formatter.formatException(record.exc_info)
            record.exc_info = None
        if record.exc_text:
            record.exc_text = _JWT_PATTERN.sub(_REDACTED, record.exc_text)
        if record.stack_info:
            record.stack_info = _JWT_PATTERN.sub(_REDACTED, record.stack_info)
        return True


class ConnectJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['service'] = SERVICE_NAME
        log_record['level'] = record.levelname
        log_record['logger'] = record.name

        if record.levelno >= logging.ERROR:
            log_record['location'] = f"{record.module}:{record.funcName}:{record.lineno}"


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: JSON lines when True, human-readable text otherwise
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(SecretRedactionFilter())

    if json_logs:
        handler.setFormatter(ConnectJsonFormatter('%(timestamp)s %(level)s %(logger)s %(message)s'))
    else:
        handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%H:%M:%S'
        ))

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.addHandler(handler)

    # Third-party chatter
    for name in ("botocore", "boto3", "urllib3", "passlib"):
        logging.getLogger(name).setLevel(logging.WARNING)
