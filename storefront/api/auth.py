# storefront/api/auth.py
# Роуты для регистрации и получения JWT токена.
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.core import security
from storefront.core.errors import EmailAlreadyRegistered, Unauthorized
from storefront.models.user import User
from storefront.schemas.auth import Credentials, RegisterOut, TokenOut

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register(payload: Credentials, db: Session = Depends(security.get_db)):
    """Регистрация пользователя: email + password."""
    existing = db.scalar(select(User).where(User.email == payload.email))
    if existing:
        raise EmailAlreadyRegistered()
    user = User(email=payload.email, hashed_password=security.get_password_hash(payload.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Параллельная регистрация с тем же email
        db.rollback()
        raise EmailAlreadyRegistered()
    db.refresh(user)
    logger.info(f"User {user.id} registered")
    return {"id": user.id, "email": user.email}


@router.post("/login", response_model=TokenOut)
def login(payload: Credentials, db: Session = Depends(security.get_db)):
    """Логин: возвращает JWT, который клиент передаёт в Authorization: Bearer."""
    user = db.scalar(select(User).where(User.email == payload.email))
    if not user or not security.verify_password(payload.password, user.hashed_password):
        raise Unauthorized("Incorrect email or password")
    token = security.create_access_token(subject=user.id)
    return {"token": token, "token_type": "bearer"}
