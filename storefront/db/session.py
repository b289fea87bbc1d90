# storefront/db/session.py
# Engine и фабрика сессий на весь процесс.
# Создаются один раз при первом обращении; блокировка не даёт двум
# параллельным первым запросам поднять два пула соединений.
# Поддерживает как Postgres, так и SQLite (для тестов/локального использования).

import logging
import threading

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from storefront.core.config import settings

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None
_init_lock = threading.Lock()


def _build(url: str) -> None:
    """Вызывается только под _init_lock."""
    global _engine, _SessionLocal
    # Для sqlite требуется connect_args; для Postgres пустой dict
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": settings.SQLITE_BUSY_TIMEOUT}
    else:
        connect_args = {}
    # pool_pre_ping полезен для долгоживущих соединений с Postgres
    _engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    logger.info(f"Database engine initialised ({_engine.url.get_backend_name()})")


def init_engine(url: str | None = None) -> Engine:
    """Создаёт (или пересоздаёт) engine. Явный вызов нужен тестам и скриптам."""
    with _init_lock:
        if _engine is not None:
            _engine.dispose()
        _build(url or settings.DATABASE_URL)
        return _engine


def get_engine() -> Engine:
    if _engine is None:
        with _init_lock:
            if _engine is None:
                _build(settings.DATABASE_URL)
    return _engine


def get_sessionmaker() -> sessionmaker:
    get_engine()
    return _SessionLocal


def dispose_engine() -> None:
    """Закрывает пул соединений; следующий get_engine() создаст его заново."""
    global _engine, _SessionLocal
    with _init_lock:
        if _engine is not None:
            _engine.dispose()
        _engine = None
        _SessionLocal = None
