from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool, text
from sqlalchemy.schema import CreateSchema

from registry_api.core.settings import get_settings
from registry_api.db import models  # noqa: F401  (registers tables on the metadata)
from registry_api.db.base import metadata

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

settings = get_settings()


def _sync_url(url: str) -> str:
    # Migrations run on a synchronous engine.
    return (
        url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        .replace("sqlite+aiosqlite", "sqlite", 1)
    )


config.set_main_option("sqlalchemy.url", _sync_url(settings.database_url))

target_metadata = metadata
_use_schema = bool(settings.db_schema) and not settings.database_url.startswith("sqlite")


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_schemas=_use_schema,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        if _use_schema:
            connection.execute(CreateSchema(settings.db_schema, if_not_exists=True))
            connection.execute(text(f'SET search_path TO "{settings.db_schema}"'))
            connection.commit()

        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_schemas=_use_schema,
            version_table_schema=settings.db_schema if _use_schema else None,
        )

        with context.begin_transaction():
            context.run_migrations()


def run_migrations() -> None:
    if context.is_offline_mode():
        run_migrations_offline()
    else:
        run_migrations_online()


run_migrations()
