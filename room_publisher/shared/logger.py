import logging
import sys
from functools import lru_cache
from os import environ
from pathlib import Path
from uuid import uuid4

from loguru import logger


def format_error(ex: BaseException) -> str:
    try:
        from traceback import TracebackException
        return ''.join(TracebackException.from_exception(ex).format())
    except Exception:
        import traceback
        return ''.join(traceback.format_exception(type(ex), ex, ex.__traceback__))


@lru_cache
def get_worker_info():
    project_root = Path(__file__).parent.parent.parent
    worker_name = environ.get('WORKER_NAME', project_root.name)

    parts = environ.get('BUILD_COMMIT', '').split('-')
    commit_id = parts[1] if len(parts) > 1 else 'dev'

    return worker_name, commit_id, uuid4().hex[:8]


class InterceptHandler(logging.Handler):
    """Forward stdlib `logging` records (e.g. from the livekit SDK) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def init_logger(debug: bool = False):
    from ..app_config import get_app_environ_config

    cfg = get_app_environ_config()
    debug = debug or cfg.DEBUG

    logger.remove()

    worker_name, commit_id, _ = get_worker_info()

    if debug:
        logger_level = 'DEBUG'
        logger_format = (
            f'<yellow>{worker_name}:{commit_id}</yellow> | '
            '<green>{time:MM-DD HH:mm:ss.SSS}</green> | '
            '<level>{level: <8}</level> | '
            '<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | '
            '<level>{message}</level>'
        )
    else:
        logger_level = 'INFO'
        logger_format = (
            f'{worker_name}:{commit_id} | '
            '{time:MM-DD HH:mm:ss.SSS} | '
            '{level: <8} | '
            '{name}:{function}:{line} | '
            '{message}'
        )
    logger.add(sys.stderr, level=logger_level, format=logger_format)

    if cfg.LOGFIRE_ENABLE:
        import logfire

        logfire.configure(
            token=cfg.LOGFIRE_TOKEN,
            service_name='room-publisher',
            service_version=environ.get('BUILD_COMMIT') or 'dev',
            console=False,
        )
        logger.add(**logfire.loguru_handler())
        logger.info('Logfire log export enabled')
