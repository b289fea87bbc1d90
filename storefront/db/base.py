# storefront/db/base.py
# Общая declarative база для SQLAlchemy.
# Модуль не импортирует модели, чтобы избежать циклических импортов.
# Имена ограничений фиксированы, чтобы alembic генерировал одинаковые миграции
# для sqlite и Postgres.

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
