# storefront/core/security.py
# Функции для хеширования паролей и работы с JWT.
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from passlib.context import CryptContext

from storefront.core.config import settings
from storefront.core.errors import Unauthorized, InvalidCredential
from storefront.db.session import get_sessionmaker

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    """Хешируем пароль для хранения в БД."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверяем пароль при логине."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """Создаём JWT токен с полем sub = subject (id пользователя)."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": str(subject), "exp": datetime.now(timezone.utc) + expires_delta}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> str:
    """
    Проверяет подпись и срок действия токена и возвращает id пользователя из sub.
    В БД не ходит: существование пользователя проверяет вызывающий код.
    """
    if not token:
        raise InvalidCredential()
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"require_exp": True},
        )
    except JWTError:
        raise InvalidCredential()
    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise InvalidCredential()
    return user_id


def get_db():
    """Зависимость для получения сессии БД в эндпоинтах."""
    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Возвращает id пользователя из Bearer-токена или бросает Unauthorized."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized()
    return verify_token(credentials.credentials)
