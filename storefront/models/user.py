# storefront/models/user.py
# Модель пользователя: email, hashed_password и строки корзины.
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from storefront.db.base import Base


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=new_id)  # UUID как текст
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    cart_items = relationship(
        "CartItem",
        back_populates="user",
        order_by="CartItem.id",
        cascade="all, delete-orphan",
    )
