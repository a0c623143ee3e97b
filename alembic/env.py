from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# Schema is written by hand in alembic/versions; there is no ORM metadata.
target_metadata = None


def _get_url() -> str:
    """Database URL: ``alembic -x db_url=...`` wins over SPARKBOOKS_DB_URL."""
    override = context.get_x_argument(as_dictionary=True).get("db_url")
    if override:
        return override

    from sparkbooks.settings import settings

    return settings.db_url


def run_migrations_offline() -> None:
    """Emit the SQL for ``alembic upgrade --sql`` without connecting."""
    context.configure(
        url=_get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(_get_url(), poolclass=pool.NullPool)

    with engine.connect() as connection:
        # batch mode lets ALTERs run on SQLite
        context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
