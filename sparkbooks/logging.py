import logging
import sys

from sparkbooks.settings import settings

TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Chatty third-party loggers, capped at WARNING.
QUIET_LOGGERS = ("alembic.runtime.migration", "sqlalchemy.engine")


def _formatter() -> logging.Formatter:
    if not settings.log_json:
        return logging.Formatter(TEXT_FORMAT)

    from pythonjsonlogger.json import JsonFormatter

    return JsonFormatter(fmt=JSON_FORMAT, rename_fields={"asctime": "timestamp", "levelname": "level"})


def configure_logging() -> None:
    """Send every record to stderr in the format chosen by ``SPARKBOOKS_LOG_JSON``.

    Alembic's ``fileConfig`` replaces the root handlers while migrating, so
    startup calls this again (as ``reconfigure``) once migrations are done.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


reconfigure = configure_logging
