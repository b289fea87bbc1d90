# storefront/main.py
# Точка входа FastAPI. Создание таблиц выполняется в lifespan с повторными попытками.

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.api import auth as auth_router
from storefront.api import cart as cart_router
from storefront.api import items as items_router
from storefront.core.config import settings
from storefront.core import security
from storefront.core.errors import StorefrontError, StorageFailure, Unauthorized, ValidationError
from storefront.db.base import Base
from storefront.db.session import dispose_engine, get_engine

# Импорт моделей, чтобы SQLAlchemy видел их определения
import storefront.models.user  # noqa: F401
import storefront.models.item  # noqa: F401
import storefront.models.cart  # noqa: F401

# Настройка логирования
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def try_create_tables(retries: int = 5, delay: int = 2) -> bool:
    """
    Пытаемся создать таблицы с повторными попытками.
    Если БД недоступна, логируем ошибку и пробуем снова.

    Args:
        retries: Количество попыток подключения
        delay: Задержка между попытками в секундах

    Returns:
        True если таблицы созданы/существуют, False если все попытки исчерпаны
    """
    for attempt in range(1, retries + 1):
        try:
            Base.metadata.create_all(bind=get_engine())
            logger.info("✅ Database tables created (or already exist).")
            return True
        except SQLAlchemyError as e:
            logger.warning(f"❌ Attempt {attempt}/{retries} failed to create tables: {e}")
            if attempt < retries:
                time.sleep(delay)
    logger.error(f"❌ Could not create tables after {retries} retries.")
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Storefront API starting up...")
    if not try_create_tables(retries=5, delay=2):
        if settings.is_production:
            raise RuntimeError("Cannot start application: database tables creation failed")
        logger.error("⚠️ Failed to create database tables. Application may not work correctly.")

    yield

    logger.info("🛑 Storefront API shutting down...")
    dispose_engine()


app = FastAPI(
    title="Storefront API",
    description="Каталог товаров, корзина и аутентификация по JWT",
    version="1.0.0",
    lifespan=lifespan,
)


class BearerGuardMiddleware(BaseHTTPMiddleware):
    """
    Проверяет Bearer-токен на закрытых путях до разбора тела запроса,
    чтобы запрос без токена получал 401, даже если тело битое.
    Зависимость get_current_user_id остаётся источником user_id для обработчиков.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method != "OPTIONS" and _requires_bearer(request.method, request.url.path):
            scheme, token = get_authorization_scheme_param(request.headers.get("Authorization"))
            try:
                if not token or scheme.lower() != "bearer":
                    raise Unauthorized()
                security.verify_token(token)
            except StorefrontError as e:
                logger.info(f"Rejected {request.method} {request.url.path}: {e.message}")
                return _error_response(e)
        return await call_next(request)


def _requires_bearer(method: str, path: str) -> bool:
    # Корзина целиком, любой конкретный товар и создание товара
    if path == "/api/cart" or path.startswith("/api/cart/"):
        return True
    if path.startswith("/api/items/"):
        return True
    return path == "/api/items" and method == "POST"


# Добавляется раньше CORS, чтобы ответ 401 тоже получал CORS-заголовки
app.add_middleware(BearerGuardMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

app.include_router(auth_router.router, prefix="/api/auth", tags=["auth"])
app.include_router(items_router.router, prefix="/api/items", tags=["items"])
app.include_router(cart_router.router, prefix="/api/cart", tags=["cart"])


@app.get("/", tags=["health"])
async def root():
    return {"status": "ok", "service": "Storefront API", "environment": settings.ENVIRONMENT}


@app.get("/health", tags=["health"])
def health():
    """Проверка, что БД отвечает."""
    try:
        with get_engine().connect() as conn:
            conn.exec_driver_sql("SELECT 1")
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "unhealthy", "database": "unavailable"})
    return {"status": "healthy", "database": "connected", "version": app.version}


def _error_response(exc: StorefrontError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        # Позиции в JSON (числа) и источник (body, query) в сообщение не попадают
        loc = first.get("loc", ())
        field = ".".join(str(p) for p in loc if p not in ("body", "query") and not isinstance(p, int))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = None
    return _error_response(ValidationError(message))


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return _error_response(StorageFailure())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
