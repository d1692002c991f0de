"""Logging configuration shared by the API process and the Celery worker"""
import logging
import sys

from beautybook.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Library loggers that drown out booking events at INFO
QUIET_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic",
    "celery",
    "uvicorn.access",
)


def setup_logging(verbose=True):
    """
    Configure the root logger once per process.

    ``verbose`` uses LOG_LEVEL from settings; otherwise only warnings are
    shown and the library loggers above are limited to errors.
    """
    settings = get_settings()

    level = logging.WARNING
    if verbose:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.StreamHandler(sys.stdout)])

    if not verbose:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.ERROR)
