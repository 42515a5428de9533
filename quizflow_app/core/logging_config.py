"""
Logging setup for QuizFlow.

Everything logs under the ``quizflow`` namespace. Request code logs through
``current_app.logger``, which gets the same handlers, so a single rotating
``quizflow.log`` holds both the engine's records and the request-side ones.
"""

import os
import logging
import logging.handlers
from typing import List, Optional


LOGGER_NAME = 'quizflow'
LOG_FILE_NAME = 'quizflow.log'
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

TEXT_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
JSON_FORMAT = ('{"time": "%(asctime)s", "level": "%(levelname)s", '
               '"logger": "%(name)s", "message": "%(message)s"}')

# Chatty third-party loggers kept at WARNING
QUIET_LOGGERS = ('werkzeug', 'apscheduler')


def _default_log_dir() -> str:
    root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    return os.path.join(root, 'logs')


def _build_handlers(level: int, log_dir: str, json_format: bool) -> List[logging.Handler]:
    formatter = logging.Formatter(JSON_FORMAT if json_format else TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    console = logging.StreamHandler()
    rotating = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME),
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding='utf-8',
    )
    for handler in (console, rotating):
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return [console, rotating]


def _replace_handlers(logger: logging.Logger, handlers: List[logging.Handler]) -> None:
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        logger.addHandler(handler)


def setup_logging(
    app=None,
    log_level: str = 'INFO',
    log_dir: Optional[str] = None,
    json_format: bool = False
) -> logging.Logger:
    """
    Configure the ``quizflow`` logger and, when ``app`` is given, the
    Flask app logger with the same console and rotating-file handlers.

    Calling it again (one app per test) replaces the handlers instead of
    stacking them.
    """
    log_dir = log_dir or _default_log_dir()
    os.makedirs(log_dir, exist_ok=True)
    level = getattr(logging, str(log_level).upper(), logging.INFO)

    handlers = _build_handlers(level, log_dir, json_format)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    _replace_handlers(logger, handlers)

    if app is not None:
        app.logger.setLevel(level)
        app.logger.propagate = False
        _replace_handlers(app.logger, list(handlers))
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging initialized: level=%s, dir=%s, json=%s", log_level, log_dir, json_format)
    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Logger under the ``quizflow`` namespace; bare names are prefixed."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + '.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{LOGGER_NAME}.{name}')
