# scripts/check_db.py
# Проверяет подключение к DATABASE_URL и наличие таблиц storefront.
import sys

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from storefront.core.config import settings
from storefront.db.session import get_engine

EXPECTED_TABLES = {"users", "items", "cart_items"}


def main() -> int:
    engine = get_engine()
    print("Trying to connect to:", engine.url.render_as_string(hide_password=True))
    try:
        with engine.connect() as conn:
            print("Connection OK, SELECT 1 ->", conn.execute(text("SELECT 1")).scalar())
        missing = EXPECTED_TABLES - set(inspect(engine).get_table_names())
    except SQLAlchemyError as e:
        print("Connection failed:", e)
        return 1
    if missing:
        print("Missing tables:", ", ".join(sorted(missing)), "- run `alembic upgrade head`")
        return 1
    print("All tables present for environment", settings.ENVIRONMENT)
    return 0


if __name__ == "__main__":
    sys.exit(main())
