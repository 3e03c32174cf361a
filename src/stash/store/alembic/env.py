"""Alembic environment for stash.

Normally driven from ``stash.store.migrate``, which hands over an open
connection through ``config.attributes["connection"]``. SQLite needs batch
mode for ALTER TABLE, so it is always on.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from stash.store.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _configure(**kwargs) -> None:
    context.configure(target_metadata=Base.metadata, render_as_batch=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    _configure(url=config.get_main_option("sqlalchemy.url"), literal_binds=True)
elif (connection := config.attributes.get("connection")) is not None:
    _configure(connection=connection)
else:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        _configure(connection=connection)
