import logging
import os

from alembic.config import Config
from sqlalchemy import Connection, create_engine, event
from sqlalchemy.engine import Engine, make_url

from alembic import command
from sparkbooks.settings import settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

_engine: Engine | None = None
_connection: Connection | None = None


def _safe_url(url: str) -> str:
    return make_url(url).render_as_string(hide_password=True)


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    # job_items cascade and document -> job references rely on this
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        url = make_url(settings.db_url)
        if url.get_backend_name() == "sqlite":
            _engine = create_engine(url)
            _enable_sqlite_foreign_keys(_engine)
        else:
            _engine = create_engine(url, pool_pre_ping=True, pool_recycle=1800)
        logger.info("Database engine created for %s", _safe_url(settings.db_url))
    return _engine


def get_connection() -> Connection:
    """Return the process-wide connection, opening it on first use.

    Repositories receive this connection explicitly; nothing else reads it.
    """
    global _connection
    if _connection is None:
        _connection = get_engine().connect()
        logger.debug("Process-wide DB connection opened")
    return _connection


def close_connection() -> None:
    global _connection
    if _connection is not None:
        _connection.close()
        _connection = None
        logger.debug("Process-wide DB connection closed")


def _get_alembic_config() -> Config:
    ini_path = os.path.join(PROJECT_ROOT, "alembic.ini")
    if not os.path.exists(ini_path):
        ini_path = os.path.join(os.getcwd(), "alembic.ini")
    cfg = Config(ini_path)
    cfg.set_main_option("script_location", os.path.join(PROJECT_ROOT, "alembic"))
    return cfg


def initialize_db() -> None:
    """Bring the schema at ``settings.db_url`` up to the latest revision."""
    logger.info("Migrating %s to head", _safe_url(settings.db_url))
    command.upgrade(_get_alembic_config(), "head")
    logger.info("Schema is up to date")
