import os
import logging
import json
import traceback
from datetime import datetime
import sys
from typing import Optional

# Configure default log level
log_level = logging.INFO

if 'GLOBAL_LOG_LEVEL' in os.environ:
    level_map = {
        'debug': logging.DEBUG,
        'info': logging.INFO,
        'warning': logging.WARNING,
        'error': logging.ERROR,
        'critical': logging.CRITICAL
    }
    log_level = level_map.get(os.environ['GLOBAL_LOG_LEVEL'].lower(), logging.INFO)

# LogRecord attributes that are never treated as structured data
RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName',
    'created', 'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'getMessage', 'extra', 'taskName', 'message', 'asctime'
}


class JsonFormatter(logging.Formatter):
    """Formats records as one JSON object per line for the log drain"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        extra_data = {k: v for k, v in record.__dict__.items() if k not in RESERVED_ATTRS}
        if extra_data:
            log_entry['extra'] = extra_data

        return json.dumps(log_entry, default=str)


use_json_logging = os.environ.get('USE_JSON_LOGGING', 'false').lower() == 'true'


def configure_root_logger():
    """Send everything to stdout, where the platform collects it"""
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if use_json_logging:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


configure_root_logger()


def get_log_level() -> int:
    return log_level


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name at the global level"""
    logger = logging.getLogger(name)
    logger.setLevel(get_log_level())
    return logger


def log_structured(logger: logging.Logger, level: int, message: str, **kwargs) -> None:
    """Log a message with key/value context.

    With JSON logging the kwargs land under "extra"; otherwise they are
    appended to the message as ``[key=value, ...]``.
    """
    if not logger.isEnabledFor(level):
        return

    exc_info = kwargs.pop('exc_info', None)
    safe_kwargs = {k: v for k, v in kwargs.items() if k not in RESERVED_ATTRS}

    if not use_json_logging and safe_kwargs:
        extra_info = ', '.join(f"{k}={v}" for k, v in safe_kwargs.items())
        message = f"{message} [{extra_info}]"

    logger.log(level, message, extra=safe_kwargs, exc_info=exc_info)


def debug(logger: logging.Logger, message: str, **kwargs) -> None:
    log_structured(logger, logging.DEBUG, message, **kwargs)


def info(logger: logging.Logger, message: str, **kwargs) -> None:
    log_structured(logger, logging.INFO, message, **kwargs)


def warning(logger: logging.Logger, message: str, **kwargs) -> None:
    log_structured(logger, logging.WARNING, message, **kwargs)


def error(logger: logging.Logger, message: str, **kwargs) -> None:
    log_structured(logger, logging.ERROR, message, **kwargs)


def exception(logger: logging.Logger, message: str, exc_info: Optional[Exception] = None, **kwargs) -> None:
    """Log at ERROR with the traceback of exc_info attached"""
    log_structured(logger, logging.ERROR, message, exc_info=exc_info or True, **kwargs)
