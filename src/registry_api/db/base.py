from __future__ import annotations

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

from registry_api.core.settings import get_settings

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _get_schema() -> str | None:
    settings = get_settings()
    # SQLite doesn't support schemas
    if settings.database_url.startswith("sqlite"):
        return None
    return settings.db_schema


metadata = MetaData(schema=_get_schema(), naming_convention=NAMING_CONVENTION)


class Base(DeclarativeBase):
    metadata = metadata
